"""
Contract Tracker — Attachment storage.

Metadata lives in the ``attachments`` table; bytes are written under
``settings.upload_dir`` with a unique stored name.
"""

import logging
import os
import time
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.config import settings
from contract_tracker.errors import DomainRuleViolation, NotFoundError
from contract_tracker.models.contract import Attachment, Contract

logger = logging.getLogger(__name__)


def _safe_name(file_name: str) -> str:
    """Strip directory parts a client may have sent along with the name."""
    return os.path.basename(file_name.replace("\\", "/")) or "file"


class AttachmentService:
    def __init__(self, db: AsyncSession, upload_dir: str | None = None):
        self.db = db
        self.upload_dir = upload_dir or settings.upload_dir
        os.makedirs(self.upload_dir, exist_ok=True)

    def path_for(self, attachment: Attachment) -> str:
        return os.path.join(self.upload_dir, attachment.file_path)

    async def upload(
        self,
        contract_id: int,
        file_name: str,
        content: bytes,
        mime_type: str | None = None,
    ) -> Attachment:
        if not await self.db.get(Contract, contract_id):
            raise NotFoundError("Contract", contract_id)
        if len(content) > settings.max_upload_bytes:
            raise DomainRuleViolation(
                f"File exceeds the {settings.max_upload_bytes // (1024 * 1024)} MB upload limit"
            )

        original = _safe_name(file_name)
        stored = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{original}"
        with open(os.path.join(self.upload_dir, stored), "wb") as fh:
            fh.write(content)

        attachment = Attachment(
            contract_id=contract_id,
            file_name=original,
            file_path=stored,
            mime_type=mime_type or "application/octet-stream",
            size=len(content),
        )
        self.db.add(attachment)
        await self.db.commit()
        await self.db.refresh(attachment)
        logger.info(f"📎 Attachment {original} stored for contract {contract_id} ({len(content)} bytes)")
        return attachment

    async def list_for_contract(self, contract_id: int) -> list[Attachment]:
        result = await self.db.execute(
            select(Attachment)
            .where(Attachment.contract_id == contract_id)
            .order_by(Attachment.id)
        )
        return list(result.scalars().all())

    async def get(self, attachment_id: int) -> Attachment:
        attachment = await self.db.get(Attachment, attachment_id)
        if not attachment:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    async def resolve_download(self, attachment_id: int) -> tuple[Attachment, str]:
        """Return the row and the on-disk path, or NotFound if either is gone."""
        attachment = await self.get(attachment_id)
        path = self.path_for(attachment)
        if not os.path.exists(path):
            raise NotFoundError("File", attachment.file_name)
        return attachment, path

    async def delete(self, attachment_id: int) -> None:
        attachment = await self.get(attachment_id)
        path = self.path_for(attachment)
        if os.path.exists(path):
            os.remove(path)
        await self.db.delete(attachment)
        await self.db.commit()
        logger.info(f"Attachment {attachment_id} deleted")
