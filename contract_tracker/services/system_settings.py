"""
Contract Tracker — Runtime settings store.

Settings that operators change without a restart live in the
``system_settings`` table as JSON. Anything never saved falls back to the
env defaults in ``contract_tracker.config``.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.config import settings
from contract_tracker.models.system_setting import SystemSetting
from contract_tracker.schemas.settings import ReminderSettings, SettingsOverview, SmtpStatus

logger = logging.getLogger(__name__)

REMINDER_KEY = "reminder"


async def get_setting(db: AsyncSession, key: str) -> Any | None:
    row = await db.get(SystemSetting, key)
    if row is None:
        return None
    try:
        return json.loads(row.value)
    except ValueError:
        logger.warning(f"⚠️ Setting '{key}' holds invalid JSON, ignoring it")
        return None


async def set_setting(db: AsyncSession, key: str, value: Any) -> None:
    encoded = json.dumps(value, ensure_ascii=False)
    row = await db.get(SystemSetting, key)
    if row is None:
        db.add(SystemSetting(key=key, value=encoded))
    else:
        row.value = encoded
    await db.commit()


def default_reminder_settings() -> ReminderSettings:
    return ReminderSettings(
        email_enabled=settings.reminder_email_enabled,
        reminder_days=list(settings.reminder_days),
        repeat_reminder=settings.reminder_repeat,
    )


async def get_reminder_settings(db: AsyncSession) -> ReminderSettings:
    """Stored reminder settings over the env defaults."""
    defaults = default_reminder_settings()
    stored = await get_setting(db, REMINDER_KEY)
    if not isinstance(stored, dict):
        return defaults
    try:
        saved = ReminderSettings.model_validate(stored)
    except ValidationError as e:
        logger.warning(f"⚠️ Stored reminder settings are invalid, using defaults: {e}")
        return defaults
    # keys missing from an older row keep their env default
    return defaults.model_copy(
        update={name: getattr(saved, name) for name in saved.model_fields_set}
    )


async def set_reminder_settings(db: AsyncSession, new: ReminderSettings) -> ReminderSettings:
    await set_setting(db, REMINDER_KEY, new.model_dump())
    logger.info(
        f"Reminder settings saved: email={new.email_enabled} "
        f"days={new.reminder_days} repeat={new.repeat_reminder}"
    )
    return new


def smtp_status() -> SmtpStatus:
    return SmtpStatus(
        configured=settings.smtp_configured,
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.smtp_sender,
    )


async def get_overview(db: AsyncSession) -> SettingsOverview:
    return SettingsOverview(reminder=await get_reminder_settings(db), smtp=smtp_status())
