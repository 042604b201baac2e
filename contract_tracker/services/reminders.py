"""
Contract Tracker — Expiry reminder job.

Runs on a fixed interval from the app lifespan. Read-only against the
contract store: it only calls the "expiring" and "unprocessed expired"
queries, logs what it finds and emails contract owners when enabled.
"""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Optional

from contract_tracker.config import settings
from contract_tracker.database import async_session
from contract_tracker.schemas.settings import ReminderSettings
from contract_tracker.services.contract_service import ContractService, format_date
from contract_tracker.services.email_service import (
    build_expiry_reminder_email,
    build_overdue_email,
    send_email,
)
from contract_tracker.services.system_settings import get_reminder_settings

logger = logging.getLogger(__name__)


class ReminderService:
    def __init__(
        self,
        session_factory=async_session,
        sender: Callable[..., Awaitable[dict]] = send_email,
        today: Optional[date] = None,
    ):
        self._session_factory = session_factory
        self._send = sender
        self._today = today

    async def load_settings(self) -> ReminderSettings:
        async with self._session_factory() as session:
            return await get_reminder_settings(session)

    @staticmethod
    def email_enabled(config: ReminderSettings) -> bool:
        return config.email_enabled and settings.smtp_configured

    async def check_expiring(self, config: ReminderSettings | None = None) -> list[dict]:
        """
        Remind owners of contracts whose days-until-expiry hits one of the
        configured reminder days (e.g. 30, 7 and 1 days out).
        """
        config = config or await self.load_settings()
        thresholds = config.reminder_days
        if not thresholds:
            return []

        async with self._session_factory() as session:
            service = ContractService(session, today=self._today)
            today = service.today()
            contracts = await service.get_expiring(thresholds[0])

        reminded: list[dict] = []
        for contract in contracts:
            days_left = (contract.expire_date - today).days
            if days_left not in thresholds:
                continue

            logger.info(f"⏰ Contract '{contract.name}' expires in {days_left} day(s)")
            sent = False
            owner = contract.created_by
            if self.email_enabled(config) and owner and owner.email:
                subject, html = build_expiry_reminder_email(
                    owner.name, contract.name, contract.partner,
                    format_date(contract.expire_date), days_left,
                )
                sent = (await self._send(to=owner.email, subject=subject, body_html=html))["success"]
            reminded.append({"contract_id": contract.id, "days_left": days_left, "emailed": sent})
        return reminded

    async def check_unprocessed_expired(self, config: ReminderSettings | None = None) -> list[dict]:
        """
        Nag owners about expired contracts nobody has processed yet, every
        ``repeat_interval_days`` days after expiry.
        """
        config = config or await self.load_settings()
        if not config.repeat_reminder:
            return []

        async with self._session_factory() as session:
            service = ContractService(session, today=self._today)
            today = service.today()
            contracts = await service.get_unprocessed_expired()

        overdue: list[dict] = []
        for contract in contracts:
            days_overdue = (today - contract.expire_date).days
            # first day overdue, then every repeat_interval_days
            if (days_overdue - 1) % config.repeat_interval_days:
                continue

            logger.warning(f"⚠️ Contract '{contract.name}' is {days_overdue} day(s) overdue and unprocessed")
            sent = False
            owner = contract.created_by
            if self.email_enabled(config) and owner and owner.email:
                subject, html = build_overdue_email(
                    owner.name, contract.name, contract.partner,
                    format_date(contract.expire_date), days_overdue,
                )
                sent = (await self._send(to=owner.email, subject=subject, body_html=html))["success"]
            overdue.append({"contract_id": contract.id, "days_overdue": days_overdue, "emailed": sent})
        return overdue

    async def run_once(self) -> dict:
        config = await self.load_settings()
        logger.info("Checking expiring contracts...")
        reminded = await self.check_expiring(config)
        logger.info("Checking unprocessed expired contracts...")
        overdue = await self.check_unprocessed_expired(config)
        return {"reminded": reminded, "overdue": overdue}


async def periodic_reminders(interval: int, service: ReminderService | None = None) -> None:
    """Run the reminder checks every ``interval`` seconds until cancelled."""
    service = service or ReminderService()
    while True:
        try:
            await asyncio.sleep(interval)
            await service.run_once()
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"Reminder run failed: {e}")
