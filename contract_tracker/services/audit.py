"""
Contract Tracker — Audit trail writer and reader.

Entries are appended to the caller's session so they commit (or roll back)
together with the change they describe. ``details`` is stored as JSON text
in one of these shapes:

    create   {"summary", "fields": {label: value}}
    update   {"summary", "changes": [{"field", "from", "to"}], "contractName"}
    process  {"summary", "changes": [...], "contractName"}
    delete   {"summary", "deletedContract": {label: value}}

Rows written by older releases may hold a bare string or an ``{"action"}``
object; ``parse_details`` reads those too.
"""

import json
import logging
from datetime import datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.models.audit_log import AuditLog
from contract_tracker.models.contract import Contract
from contract_tracker.schemas.contract import AuditLogQuery

logger = logging.getLogger(__name__)


def record(
    db: AsyncSession,
    action: str,
    contract_id: int | None,
    user_id: int | None,
    details: dict,
) -> AuditLog:
    """Stage an audit entry on ``db``. The caller's commit persists it."""
    entry = AuditLog(
        action=action,
        contract_id=contract_id,
        user_id=user_id,
        details=json.dumps(details, ensure_ascii=False, default=str),
    )
    db.add(entry)
    logger.debug(f"Audit {action} staged for contract {contract_id} by user {user_id}")
    return entry


def parse_details(raw: str | None) -> dict:
    """Decode a stored ``details`` blob, tolerating legacy and broken values."""
    if not raw:
        return {"summary": "", "legacy": True}
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return {"summary": raw, "legacy": True}

    if not isinstance(data, dict):
        # e.g. a JSON-encoded plain string
        return {"summary": str(data), "legacy": True}
    if "summary" not in data:
        # {"action": "..."} objects from before summaries existed
        return {**data, "summary": str(data.get("action", "")), "legacy": True}
    return data


def contract_name_from(details: dict) -> str | None:
    """Best-effort contract name recovered from the details payload."""
    if details.get("contractName"):
        return details["contractName"]
    for key in ("deletedContract", "fields"):
        snapshot = details.get(key)
        if isinstance(snapshot, dict) and snapshot:
            return str(next(iter(snapshot.values())))
    return None


def to_response(log: AuditLog, contract_name: str | None = None) -> dict:
    details = parse_details(log.details)
    return {
        "id": log.id,
        "action": log.action,
        "contract_id": log.contract_id,
        "contract_name": contract_name or contract_name_from(details),
        "user_id": log.user_id,
        "user": log.user,
        "details": details,
        "created_at": log.created_at,
    }


async def list_logs(db: AsyncSession, query: AuditLogQuery) -> tuple[list[dict], int]:
    """Page through the audit trail, newest first."""
    conditions = []
    if query.action:
        conditions.append(AuditLog.action == query.action)
    if query.contract_id is not None:
        conditions.append(AuditLog.contract_id == query.contract_id)
    if query.start_date:
        conditions.append(AuditLog.created_at >= datetime.combine(query.start_date, time.min))
    if query.end_date:
        # inclusive of the whole end day
        conditions.append(
            AuditLog.created_at < datetime.combine(query.end_date + timedelta(days=1), time.min)
        )

    stmt = (
        select(AuditLog, Contract.name)
        .outerjoin(Contract, Contract.id == AuditLog.contract_id)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .execution_options(populate_existing=True)
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    result = await db.execute(stmt)
    rows = [to_response(log, name) for log, name in result.all()]

    total = await db.scalar(select(func.count(AuditLog.id)).where(*conditions))
    return rows, total or 0


async def logs_for_contract(db: AsyncSession, contract_id: int) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.contract_id == contract_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
