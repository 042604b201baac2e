"""
API Routes — health and shared dependencies.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.database import get_db
from contract_tracker.schemas import HealthResponse
from contract_tracker.services.attachments import AttachmentService
from contract_tracker.services.contract_service import ContractService
from contract_tracker.services.tags import TagService
from contract_tracker.services.users import get_user

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Dependencies ────────────────────────────────────────

async def get_actor_id(
    x_user_id: int = Header(..., description="Id of the acting user"),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Resolve the acting user. Sessions/tokens are issued elsewhere."""
    if not await get_user(db, x_user_id):
        raise HTTPException(status_code=401, detail=f"Unknown user {x_user_id}")
    return x_user_id


def get_contract_service(db: AsyncSession = Depends(get_db)) -> ContractService:
    return ContractService(db)


def get_attachment_service(db: AsyncSession = Depends(get_db)) -> AttachmentService:
    return AttachmentService(db)


def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


# ── Health ──────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["system"])
async def health():
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
