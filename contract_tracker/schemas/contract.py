"""
Contract Tracker — Contract, field, attachment & audit Pydantic schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from contract_tracker.schemas import AuditAction, ContractStatus, FieldType

# Scalar values allowed inside custom_data
CustomValue = Union[str, int, float, bool, None]

SORT_FIELDS = ("name", "partner", "sign_date", "expire_date", "status", "created_at")


# ── User ────────────────────────────────────────────────
class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


# ── Attachment ──────────────────────────────────────────
class AttachmentResponse(BaseModel):
    id: int
    contract_id: int
    file_name: str
    mime_type: str
    size: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ── Contract ────────────────────────────────────────────
class ContractCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    partner: str = Field(..., min_length=1, max_length=300)
    sign_date: date
    expire_date: date
    status: ContractStatus = ContractStatus.ACTIVE
    custom_data: dict[str, CustomValue] = {}

    model_config = {"use_enum_values": True, "validate_default": True}


class ContractUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    partner: Optional[str] = Field(None, min_length=1, max_length=300)
    sign_date: Optional[date] = None
    expire_date: Optional[date] = None
    status: Optional[ContractStatus] = None
    is_processed: Optional[bool] = None
    custom_data: Optional[dict[str, CustomValue]] = None

    model_config = {"use_enum_values": True}


class ContractQuery(BaseModel):
    status: Optional[
        Literal["active", "archived", "void", "expiring", "expired", "unprocessed"]
    ] = None
    search: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=1000)
    sort_field: Optional[str] = None
    sort_order: Literal["asc", "desc"] = "asc"


class ContractResponse(BaseModel):
    id: int
    name: str
    partner: str
    sign_date: date
    expire_date: date
    status: str
    is_processed: bool
    custom_data: dict[str, CustomValue] = {}
    created_by_id: Optional[int] = None
    created_by: Optional[UserBrief] = None
    attachments: list[AttachmentResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContractDetailResponse(ContractResponse):
    logs: list[AuditLogResponse] = []


class ContractListResponse(BaseModel):
    data: list[ContractResponse]
    total: int
    page: int
    limit: int
    total_pages: int


# ── Stats ───────────────────────────────────────────────
class StatusBucket(BaseModel):
    type: str
    value: int


class TrendPoint(BaseModel):
    month: str  # YYYY-MM
    count: int


class StatsResponse(BaseModel):
    total_contracts: int
    active_contracts: int
    expiring_contracts: int
    expired_contracts: int
    processed_contracts: int
    status_distribution: list[StatusBucket]
    expiry_trend: list[TrendPoint]


# ── Contract fields ─────────────────────────────────────
class FieldCreateRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    label: str = Field(..., min_length=1, max_length=200)
    type: FieldType = FieldType.TEXT

    model_config = {"use_enum_values": True, "validate_default": True}


class FieldUpdateRequest(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[FieldType] = None
    is_visible: Optional[bool] = None

    model_config = {"use_enum_values": True}


class FieldResponse(BaseModel):
    id: int
    key: str
    label: str
    type: str
    is_system: bool
    is_visible: bool
    order: int

    model_config = {"from_attributes": True}


# ── Audit log ───────────────────────────────────────────
class AuditLogQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=500)
    action: Optional[AuditAction] = None
    contract_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = {"use_enum_values": True}


class AuditLogResponse(BaseModel):
    id: int
    action: str
    contract_id: Optional[int] = None
    contract_name: Optional[str] = None
    user_id: Optional[int] = None
    user: Optional[UserBrief] = None
    details: dict = {}
    created_at: Optional[datetime] = None


class AuditLogListResponse(BaseModel):
    data: list[AuditLogResponse]
    total: int
    page: int
    limit: int


ContractDetailResponse.model_rebuild()
