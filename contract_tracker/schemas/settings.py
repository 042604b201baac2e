"""
Contract Tracker — Runtime settings schemas.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class ReminderSettings(BaseModel):
    """
    Reminder behaviour editable at runtime. Stored as JSON in the
    ``system_settings`` table; the camelCase keys of older rows are accepted.
    """
    email_enabled: bool = Field(
        False, validation_alias=AliasChoices("email_enabled", "emailEnabled")
    )
    reminder_days: list[int] = Field(
        default=[30, 7, 1], validation_alias=AliasChoices("reminder_days", "reminderDays")
    )
    repeat_reminder: bool = Field(
        True, validation_alias=AliasChoices("repeat_reminder", "repeatReminder")
    )
    repeat_interval_days: int = Field(
        1, ge=1, le=365,
        validation_alias=AliasChoices("repeat_interval_days", "repeatIntervalDays"),
    )

    @field_validator("reminder_days")
    @classmethod
    def _normalize_days(cls, days: list[int]) -> list[int]:
        if any(d < 0 or d > 3650 for d in days):
            raise ValueError("reminder days must be between 0 and 3650")
        return sorted(set(days), reverse=True)


class SmtpStatus(BaseModel):
    """Read-only view of the env-configured transport. Never includes the password."""
    configured: bool
    host: str
    port: int
    sender: str


class SettingsOverview(BaseModel):
    reminder: ReminderSettings
    smtp: Optional[SmtpStatus] = None
