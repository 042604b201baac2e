"""
Contract Tracker — Audit log API routes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.database import get_db
from contract_tracker.schemas.contract import AuditLogListResponse, AuditLogQuery
from contract_tracker.services import audit

audit_router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


@audit_router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    query: Annotated[AuditLogQuery, Query()],
    db: AsyncSession = Depends(get_db),
):
    """
    Audit trail, newest first.
    Optional filters: action, contract_id, start_date / end_date (inclusive).
    """
    rows, total = await audit.list_logs(db, query)
    return {"data": rows, "total": total, "page": query.page, "limit": query.limit}
