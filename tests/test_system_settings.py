"""
Tests for runtime settings — env fallbacks, persistence, and their effect on the reminder job.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from contract_tracker.config import settings
from contract_tracker.models.system_setting import SystemSetting
from contract_tracker.schemas.settings import ReminderSettings
from contract_tracker.services import system_settings
from contract_tracker.services.reminders import ReminderService
from tests.conftest import TODAY


@pytest.fixture
def env_reminders():
    with patch.object(settings, "reminder_email_enabled", False), \
         patch.object(settings, "reminder_days", [30, 7, 1]), \
         patch.object(settings, "reminder_repeat", True):
        yield


class TestReminderSettings:
    def test_days_deduplicated_and_sorted(self):
        config = ReminderSettings(reminder_days=[1, 30, 7, 7])
        assert config.reminder_days == [30, 7, 1]

    def test_negative_day_rejected(self):
        with pytest.raises(ValueError):
            ReminderSettings(reminder_days=[-1])

    def test_camel_case_keys_accepted(self):
        config = ReminderSettings.model_validate(
            {"emailEnabled": True, "reminderDays": [14], "repeatReminder": False}
        )
        assert config.email_enabled is True
        assert config.reminder_days == [14]
        assert config.repeat_reminder is False


class TestStore:
    async def test_defaults_come_from_env(self, db_session, env_reminders):
        config = await system_settings.get_reminder_settings(db_session)

        assert config.email_enabled is False
        assert config.reminder_days == [30, 7, 1]
        assert config.repeat_reminder is True
        assert config.repeat_interval_days == 1

    async def test_save_then_load(self, db_session, env_reminders):
        await system_settings.set_reminder_settings(
            db_session, ReminderSettings(email_enabled=True, reminder_days=[14, 3])
        )

        config = await system_settings.get_reminder_settings(db_session)
        assert config.email_enabled is True
        assert config.reminder_days == [14, 3]

    async def test_save_overwrites_single_row(self, db_session, env_reminders):
        await system_settings.set_reminder_settings(db_session, ReminderSettings(reminder_days=[10]))
        await system_settings.set_reminder_settings(db_session, ReminderSettings(reminder_days=[5]))

        row = await db_session.get(SystemSetting, system_settings.REMINDER_KEY)
        assert json.loads(row.value)["reminder_days"] == [5]

    async def test_partial_legacy_row_keeps_env_defaults(self, db_session, env_reminders):
        db_session.add(SystemSetting(key="reminder", value=json.dumps({"reminderDays": [2]})))
        await db_session.commit()

        with patch.object(settings, "reminder_email_enabled", True):
            config = await system_settings.get_reminder_settings(db_session)

        assert config.reminder_days == [2]
        assert config.email_enabled is True
        assert config.repeat_reminder is True

    async def test_broken_row_falls_back(self, db_session, env_reminders):
        db_session.add(SystemSetting(key="reminder", value="{not json"))
        await db_session.commit()

        config = await system_settings.get_reminder_settings(db_session)
        assert config.reminder_days == [30, 7, 1]

    async def test_invalid_values_fall_back(self, db_session, env_reminders):
        db_session.add(SystemSetting(key="reminder", value=json.dumps({"reminder_days": [-5]})))
        await db_session.commit()

        config = await system_settings.get_reminder_settings(db_session)
        assert config.reminder_days == [30, 7, 1]

    async def test_overview_hides_password(self, db_session, env_reminders):
        with patch.object(settings, "smtp_host", "smtp.test.local"), \
             patch.object(settings, "smtp_user", "robot@test.local"), \
             patch.object(settings, "smtp_password", "s3cret"):
            overview = await system_settings.get_overview(db_session)

        assert overview.smtp.configured is True
        assert "s3cret" not in overview.model_dump_json()


class TestReminderJobUsesStoredSettings:
    async def test_stored_days_replace_env_days(
        self, db_session, session_factory, make_contract, env_reminders
    ):
        in_5 = await make_contract(name="In 5", expires_in=5)
        await make_contract(name="In 7", expires_in=7)
        await system_settings.set_reminder_settings(db_session, ReminderSettings(reminder_days=[5]))

        result = await ReminderService(session_factory, today=TODAY).check_expiring()

        assert [r["contract_id"] for r in result] == [in_5.id]

    async def test_stored_email_switch(self, db_session, session_factory, make_contract, env_reminders):
        await make_contract(name="In 7", expires_in=7)
        await system_settings.set_reminder_settings(
            db_session, ReminderSettings(email_enabled=True)
        )
        sender = AsyncMock(return_value={"success": True, "message": "sent"})

        with patch.object(settings, "smtp_host", "smtp.test.local"), \
             patch.object(settings, "smtp_user", "robot@test.local"):
            result = await ReminderService(session_factory, sender=sender, today=TODAY).run_once()

        assert result["reminded"][0]["emailed"] is True
        sender.assert_awaited_once()

    async def test_stored_repeat_off(self, db_session, session_factory, make_contract, env_reminders):
        await make_contract(name="Late", expires_in=-3)
        await system_settings.set_reminder_settings(
            db_session, ReminderSettings(repeat_reminder=False)
        )

        result = await ReminderService(session_factory, today=TODAY).check_unprocessed_expired()
        assert result == []

    async def test_repeat_interval(self, db_session, session_factory, make_contract, env_reminders):
        day_1 = await make_contract(name="Late 1", expires_in=-1)
        await make_contract(name="Late 2", expires_in=-2)
        day_4 = await make_contract(name="Late 4", expires_in=-4)
        await system_settings.set_reminder_settings(
            db_session, ReminderSettings(repeat_interval_days=3)
        )

        result = await ReminderService(session_factory, today=TODAY).check_unprocessed_expired()

        assert [r["contract_id"] for r in result] == [day_4.id, day_1.id]
