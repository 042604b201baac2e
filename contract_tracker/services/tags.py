"""
Contract Tracker — Tag catalogue.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contract_tracker.errors import DomainRuleViolation, NotFoundError
from contract_tracker.models.tag import Tag
from contract_tracker.schemas.tag import TagCreateRequest, TagUpdateRequest

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tags(self) -> list[Tag]:
        result = await self.db.execute(select(Tag).order_by(Tag.name.asc(), Tag.id.asc()))
        return list(result.scalars().all())

    async def get(self, tag_id: int) -> Tag:
        tag = await self.db.get(Tag, tag_id)
        if not tag:
            raise NotFoundError("Tag", tag_id)
        return tag

    async def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        stmt = select(Tag.id).where(Tag.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Tag.id != exclude_id)
        if await self.db.scalar(stmt) is not None:
            raise DomainRuleViolation(f"Tag '{name}' already exists")

    async def create_tag(self, req: TagCreateRequest) -> Tag:
        name = req.name.strip()
        await self._ensure_name_free(name)

        tag = Tag(name=name, color=req.color)
        self.db.add(tag)
        await self.db.commit()
        await self.db.refresh(tag)
        logger.info(f"🏷️ Tag created: {tag.name} ({tag.color})")
        return tag

    async def update_tag(self, tag_id: int, req: TagUpdateRequest) -> Tag:
        tag = await self.get(tag_id)
        data = {k: v for k, v in req.model_dump(exclude_unset=True).items() if v is not None}
        if "name" in data:
            data["name"] = data["name"].strip()
            await self._ensure_name_free(data["name"], exclude_id=tag.id)

        for key, value in data.items():
            setattr(tag, key, value)
        await self.db.commit()
        await self.db.refresh(tag)
        return tag

    async def delete_tag(self, tag_id: int) -> None:
        tag = await self.get(tag_id)
        await self.db.delete(tag)
        await self.db.commit()
        logger.info(f"Tag deleted: {tag.name}")
