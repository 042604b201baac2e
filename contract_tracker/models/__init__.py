from contract_tracker.models.user import User  # noqa: F401
from contract_tracker.models.contract import Contract, ContractField, Attachment  # noqa: F401
from contract_tracker.models.audit_log import AuditLog  # noqa: F401
from contract_tracker.models.tag import Tag  # noqa: F401
from contract_tracker.models.system_setting import SystemSetting  # noqa: F401
