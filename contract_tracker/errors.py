"""
Contract Tracker — Domain errors raised by services, mapped to HTTP in main.py.
"""


class ContractTrackerError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ContractTrackerError):
    """An id did not resolve to a row."""

    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class DomainRuleViolation(ContractTrackerError):
    """The request is well-formed but breaks a business rule."""
