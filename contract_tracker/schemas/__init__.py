"""
Contract Tracker — Shared enums and system schemas.
"""

from enum import Enum

from pydantic import BaseModel


class ContractStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    VOID = "void"


class DerivedStatus(str, Enum):
    """Buckets computed from expire_date and is_processed, never stored."""
    EXPIRING = "expiring"
    EXPIRED = "expired"
    UNPROCESSED = "unprocessed"


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    PROCESS = "process"
    DELETE = "delete"


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "1.0.0"
    timestamp: str | None = None
