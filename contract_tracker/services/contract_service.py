"""
Contract Tracker — Contract record manager.

Owns contract CRUD, the derived status buckets (expiring / expired /
unprocessed), the custom-field schema and audit trail generation. One
instance wraps one ``AsyncSession``; every mutating call commits.
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.config import settings
from contract_tracker.errors import DomainRuleViolation, NotFoundError
from contract_tracker.models.audit_log import AuditLog
from contract_tracker.models.contract import Contract, ContractField
from contract_tracker.schemas import AuditAction, ContractStatus
from contract_tracker.schemas.contract import (
    ContractCreateRequest,
    ContractQuery,
    ContractUpdateRequest,
    FieldCreateRequest,
    FieldUpdateRequest,
    SORT_FIELDS,
)
from contract_tracker.services import audit

logger = logging.getLogger(__name__)

# Labels used in audit details; overridden by the field schema where a row exists
FIELD_LABELS = {
    "name": "Contract Name",
    "partner": "Partner",
    "sign_date": "Sign Date",
    "expire_date": "Expire Date",
    "status": "Status",
    "is_processed": "Processing Status",
    "created_by": "Created By",
}

STATUS_LABELS = {
    "active": "Active",
    "archived": "Archived",
    "void": "Void",
}

# (key, type) in display order; seeded by init_system_fields
SYSTEM_FIELDS = [
    ("name", "text"),
    ("partner", "text"),
    ("sign_date", "date"),
    ("expire_date", "date"),
    ("status", "text"),
    ("created_by", "text"),
]

EMPTY = "(empty)"

# camelCase names accepted from older clients
_SORT_ALIASES = {
    "signDate": "sign_date",
    "expireDate": "expire_date",
    "createdAt": "created_at",
}


def format_date(value: date | None) -> str:
    """Normalize to YYYY-MM-DD so time-of-day never produces a diff."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value[:10]
    return value.isoformat()[:10]


def status_label(status: str | None) -> str:
    return STATUS_LABELS.get(status or "", status or "")


def processed_label(flag: bool) -> str:
    return "Processed" if flag else "Unprocessed"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_changes(existing: Contract, data: dict, labels: dict[str, str]) -> list[dict]:
    """
    Field-by-field diff of ``data`` (only the keys being applied) against
    the current record. Unchanged fields are left out.
    """
    changes: list[dict] = []

    def add(key: str, old: str, new: str) -> None:
        changes.append({"field": labels.get(key, key), "from": old, "to": new})

    for key in ("name", "partner"):
        if key in data and data[key] != getattr(existing, key):
            add(key, getattr(existing, key), data[key])

    for key in ("sign_date", "expire_date"):
        if key in data:
            old, new = format_date(getattr(existing, key)), format_date(data[key])
            if old != new:
                add(key, old, new)

    if "status" in data and data["status"] != existing.status:
        add("status", status_label(existing.status), status_label(data["status"]))

    if "is_processed" in data and bool(data["is_processed"]) != bool(existing.is_processed):
        add(
            "is_processed",
            processed_label(bool(existing.is_processed)),
            processed_label(bool(data["is_processed"])),
        )

    if "custom_data" in data:
        old_custom = existing.custom_data or {}
        new_custom = data["custom_data"] or {}
        for key in dict.fromkeys([*old_custom, *new_custom]):
            old, new = _text(old_custom.get(key)), _text(new_custom.get(key))
            if old != new:
                add(key, old or EMPTY, new or EMPTY)

    return changes


def _add_months(start: date, months: int) -> date:
    """First day of the month ``months`` after ``start``'s month."""
    years, month_index = divmod(start.month - 1 + months, 12)
    return date(start.year + years, month_index + 1, 1)


class ContractService:
    """Contract CRUD, derived-status queries, stats and the field schema."""

    def __init__(
        self,
        db: AsyncSession,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ):
        self.db = db
        self.window_days = (
            window_days if window_days is not None else settings.expiring_window_days
        )
        self._today = today

    def today(self) -> date:
        return self._today or date.today()

    # ── Loading ─────────────────────────────────────────

    async def _load(self, contract_id: int) -> Contract | None:
        result = await self.db.execute(
            select(Contract)
            .where(Contract.id == contract_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, contract_id: int) -> Contract:
        contract = await self._load(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        return contract

    async def get_logs(self, contract_id: int) -> list[AuditLog]:
        return await audit.logs_for_contract(self.db, contract_id)

    async def find_by_ids(self, ids: Iterable[int]) -> list[Contract]:
        ids = list(ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Contract).where(Contract.id.in_(ids)).order_by(Contract.id)
        )
        return list(result.scalars().all())

    async def _labels(self) -> dict[str, str]:
        """Default labels overlaid with the (editable) labels of the field schema."""
        result = await self.db.execute(select(ContractField.key, ContractField.label))
        return {**FIELD_LABELS, **{key: label for key, label in result.all()}}

    # ── Mutations ───────────────────────────────────────

    async def create(self, req: ContractCreateRequest, actor_id: int | None) -> Contract:
        contract = Contract(
            name=req.name,
            partner=req.partner,
            sign_date=req.sign_date,
            expire_date=req.expire_date,
            status=req.status or ContractStatus.ACTIVE.value,
            is_processed=False,
            custom_data=dict(req.custom_data or {}),
            created_by_id=actor_id,
        )
        self.db.add(contract)
        await self.db.flush()

        labels = await self._labels()
        fields = {
            labels["name"]: contract.name,
            labels["partner"]: contract.partner,
            labels["sign_date"]: format_date(contract.sign_date),
            labels["expire_date"]: format_date(contract.expire_date),
            labels["status"]: status_label(contract.status),
        }
        for key, value in contract.custom_data.items():
            if _text(value):
                fields[labels.get(key, key)] = _text(value)

        audit.record(
            self.db, AuditAction.CREATE.value, contract.id, actor_id,
            {"summary": "Contract created", "fields": fields},
        )
        await self.db.commit()
        logger.info(f"✅ Contract created: {contract.id} ({contract.name}) by user {actor_id}")
        return await self.get(contract.id)

    async def update(
        self, contract_id: int, req: ContractUpdateRequest, actor_id: int | None
    ) -> Contract:
        contract = await self.get(contract_id)

        # explicit nulls are treated as "not provided"
        data = {
            key: value
            for key, value in req.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if data.get("is_processed") is False and contract.is_processed:
            raise DomainRuleViolation("A processed contract cannot be marked unprocessed")

        labels = await self._labels()
        changes = build_changes(contract, data, labels)
        contract_name = contract.name

        for key, value in data.items():
            if key == "custom_data":
                value = dict(value)
            setattr(contract, key, value)

        audit.record(
            self.db, AuditAction.UPDATE.value, contract.id, actor_id,
            {
                "summary": f"Updated {len(changes)} field(s)" if changes else "No changes",
                "changes": changes,
                "contractName": contract_name,
            },
        )
        await self.db.commit()
        logger.info(f"✏️ Contract {contract_id} updated by user {actor_id}: {len(changes)} change(s)")
        return await self.get(contract_id)

    async def mark_processed(self, contract_id: int, actor_id: int | None) -> Contract:
        """Set is_processed. Always writes one audit entry, even if already set."""
        contract = await self.get(contract_id)
        labels = await self._labels()

        before = bool(contract.is_processed)
        contract.is_processed = True

        audit.record(
            self.db, AuditAction.PROCESS.value, contract.id, actor_id,
            {
                "summary": "Marked as processed",
                "changes": [{
                    "field": labels["is_processed"],
                    "from": processed_label(before),
                    "to": processed_label(True),
                }],
                "contractName": contract.name,
            },
        )
        await self.db.commit()
        logger.info(f"✅ Contract {contract_id} marked processed by user {actor_id}")
        return await self.get(contract_id)

    async def delete(self, contract_id: int, actor_id: int | None) -> None:
        """Write the final audit snapshot, then hard-delete the row."""
        contract = await self.get(contract_id)
        labels = await self._labels()

        audit.record(
            self.db, AuditAction.DELETE.value, contract.id, actor_id,
            {
                "summary": "Contract deleted",
                "deletedContract": {
                    labels["name"]: contract.name,
                    labels["partner"]: contract.partner,
                    labels["sign_date"]: format_date(contract.sign_date),
                    labels["expire_date"]: format_date(contract.expire_date),
                    labels["status"]: status_label(contract.status),
                },
            },
        )
        await self.db.delete(contract)
        await self.db.commit()
        logger.info(f"🗑️ Contract {contract_id} deleted by user {actor_id}")

    # ── Queries ─────────────────────────────────────────

    def _status_conditions(self, status: str) -> list:
        today = self.today()
        if status == "expiring":
            return [
                Contract.status == ContractStatus.ACTIVE.value,
                Contract.is_processed.is_(False),
                Contract.expire_date >= today,
                Contract.expire_date <= today + timedelta(days=self.window_days),
            ]
        if status == "expired":
            return [
                Contract.status == ContractStatus.ACTIVE.value,
                Contract.is_processed.is_(False),
                Contract.expire_date < today,
            ]
        if status == "unprocessed":
            return [
                Contract.expire_date < today,
                Contract.is_processed.is_(False),
            ]
        return [Contract.status == status]

    @staticmethod
    def _order_by(sort_field: str | None, sort_order: str):
        field = _SORT_ALIASES.get(sort_field or "", sort_field)
        if field not in SORT_FIELDS:
            return [Contract.expire_date.asc(), Contract.id.asc()]
        column = getattr(Contract, field)
        return [column.desc() if sort_order == "desc" else column.asc(), Contract.id.asc()]

    async def _count(self, *conditions) -> int:
        return await self.db.scalar(select(func.count(Contract.id)).where(*conditions)) or 0

    async def list_contracts(self, query: ContractQuery) -> dict:
        conditions = []
        if query.status:
            conditions.extend(self._status_conditions(query.status))
        if query.search:
            conditions.append(or_(
                Contract.name.icontains(query.search, autoescape=True),
                Contract.partner.icontains(query.search, autoescape=True),
            ))

        result = await self.db.execute(
            select(Contract)
            .where(*conditions)
            .order_by(*self._order_by(query.sort_field, query.sort_order))
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        contracts = list(result.scalars().all())
        total = await self._count(*conditions)

        return {
            "data": contracts,
            "total": total,
            "page": query.page,
            "limit": query.limit,
            "total_pages": math.ceil(total / query.limit),
        }

    async def get_expiring(self, days: int = 30) -> list[Contract]:
        """Active, unprocessed contracts due within ``days`` (overdue ones included)."""
        result = await self.db.execute(
            select(Contract)
            .where(
                Contract.status == ContractStatus.ACTIVE.value,
                Contract.is_processed.is_(False),
                Contract.expire_date <= self.today() + timedelta(days=days),
            )
            .order_by(Contract.expire_date.asc(), Contract.id.asc())
        )
        return list(result.scalars().all())

    async def get_unprocessed_expired(self) -> list[Contract]:
        result = await self.db.execute(
            select(Contract)
            .where(*self._status_conditions("expired"))
            .order_by(Contract.expire_date.asc(), Contract.id.asc())
        )
        return list(result.scalars().all())

    async def stats(self) -> dict:
        total = await self._count()
        active = await self._count(Contract.status == ContractStatus.ACTIVE.value)
        expiring = await self._count(*self._status_conditions("expiring"))
        expired = await self._count(*self._status_conditions("expired"))
        processed = await self._count(Contract.is_processed.is_(True))
        archived = await self._count(Contract.status == ContractStatus.ARCHIVED.value)

        first_of_month = self.today().replace(day=1)
        expiry_trend = []
        for offset in range(6):
            month_start = _add_months(first_of_month, offset)
            month_end = _add_months(first_of_month, offset + 1)
            count = await self._count(
                Contract.expire_date >= month_start,
                Contract.expire_date < month_end,
            )
            expiry_trend.append({"month": month_start.strftime("%Y-%m"), "count": count})

        return {
            "total_contracts": total,
            "active_contracts": active,
            "expiring_contracts": expiring,
            "expired_contracts": expired,
            "processed_contracts": processed,
            "status_distribution": [
                {"type": "active", "value": active - expiring},
                {"type": "expiring", "value": expiring},
                {"type": "expired", "value": expired},
                {"type": "archived", "value": archived},
            ],
            "expiry_trend": expiry_trend,
        }

    # ── Field schema ────────────────────────────────────

    async def get_fields(self) -> list[ContractField]:
        result = await self.db.execute(
            select(ContractField).order_by(ContractField.order.asc(), ContractField.id.asc())
        )
        return list(result.scalars().all())

    async def init_system_fields(self) -> int:
        """Insert any missing system field. Safe to call on every start."""
        keys = [key for key, _ in SYSTEM_FIELDS]
        result = await self.db.execute(
            select(ContractField.key).where(ContractField.key.in_(keys))
        )
        existing = set(result.scalars().all())

        created = 0
        for order, (key, field_type) in enumerate(SYSTEM_FIELDS, start=1):
            if key in existing:
                continue
            self.db.add(ContractField(
                key=key,
                label=FIELD_LABELS[key],
                type=field_type,
                is_system=True,
                is_visible=True,
                order=order,
            ))
            created += 1

        if created:
            await self.db.commit()
            logger.info(f"Seeded {created} system field(s)")
        return created

    async def _get_field(self, field_id: int) -> ContractField:
        field = await self.db.get(ContractField, field_id)
        if not field:
            raise NotFoundError("Field", field_id)
        return field

    async def create_field(self, req: FieldCreateRequest) -> ContractField:
        duplicate = await self.db.scalar(
            select(ContractField.id).where(ContractField.key == req.key)
        )
        if duplicate is not None:
            raise DomainRuleViolation(f"Field key '{req.key}' already exists")

        max_order = await self.db.scalar(select(func.max(ContractField.order)))
        field = ContractField(
            key=req.key,
            label=req.label,
            type=req.type,
            is_system=False,
            is_visible=True,
            order=(max_order or 0) + 1,
        )
        self.db.add(field)
        await self.db.commit()
        await self.db.refresh(field)
        logger.info(f"Field created: {field.key} ({field.type})")
        return field

    async def update_field(self, field_id: int, req: FieldUpdateRequest) -> ContractField:
        """Label, type and visibility of a custom field; only the label of a system field."""
        field = await self._get_field(field_id)
        data = {
            key: value
            for key, value in req.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if field.is_system:
            locked = [
                key for key in ("type", "is_visible")
                if key in data and data[key] != getattr(field, key)
            ]
            if locked:
                raise DomainRuleViolation(
                    f"Only the label of system field '{field.key}' can be edited"
                )

        for key, value in data.items():
            setattr(field, key, value)
        await self.db.commit()
        await self.db.refresh(field)
        return field

    async def delete_field(self, field_id: int) -> None:
        field = await self._get_field(field_id)
        if field.is_system:
            raise DomainRuleViolation("System fields cannot be deleted")
        await self.db.delete(field)
        await self.db.commit()
        logger.info(f"Field deleted: {field.key}")
