"""
Contract Tracker — Runtime settings API routes.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.database import get_db
from contract_tracker.routes import get_actor_id
from contract_tracker.schemas.settings import ReminderSettings, SettingsOverview
from contract_tracker.services import system_settings

logger = logging.getLogger(__name__)
settings_router = APIRouter(prefix="/settings", tags=["settings"])


@settings_router.get("", response_model=SettingsOverview)
async def get_all_settings(db: AsyncSession = Depends(get_db)):
    """Reminder settings plus a read-only view of the SMTP transport."""
    return await system_settings.get_overview(db)


@settings_router.get("/reminder", response_model=ReminderSettings)
async def get_reminder_settings(db: AsyncSession = Depends(get_db)):
    return await system_settings.get_reminder_settings(db)


@settings_router.put("/reminder", response_model=ReminderSettings)
async def put_reminder_settings(
    req: ReminderSettings,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Replace the reminder settings. Picked up by the next reminder run."""
    saved = await system_settings.set_reminder_settings(db, req)
    logger.info(f"⚙️ Reminder settings updated by user {actor_id}")
    return saved
