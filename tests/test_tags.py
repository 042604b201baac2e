"""
Tests for the tag catalogue — ordering, defaults, rename and delete rules.
"""

import pytest
from pydantic import ValidationError

from contract_tracker.errors import DomainRuleViolation, NotFoundError
from contract_tracker.schemas.tag import TagCreateRequest, TagUpdateRequest
from contract_tracker.services.tags import TagService


@pytest.fixture
def tags(db_session):
    return TagService(db_session)


class TestCreateTag:
    async def test_default_color(self, tags):
        tag = await tags.create_tag(TagCreateRequest(name="Legal"))
        assert tag.color == "#1890ff"
        assert tag.id is not None

    async def test_name_trimmed(self, tags):
        tag = await tags.create_tag(TagCreateRequest(name="  Vendor ", color="#52c41a"))
        assert tag.name == "Vendor"
        assert tag.color == "#52c41a"

    async def test_duplicate_name(self, tags):
        await tags.create_tag(TagCreateRequest(name="Legal"))
        with pytest.raises(DomainRuleViolation):
            await tags.create_tag(TagCreateRequest(name="Legal", color="#f5222d"))

    def test_color_must_be_hex(self):
        with pytest.raises(ValidationError):
            TagCreateRequest(name="Legal", color="red")


class TestListTags:
    async def test_ordered_by_name(self, tags):
        for name in ("Vendor", "Finance", "Legal"):
            await tags.create_tag(TagCreateRequest(name=name))

        assert [t.name for t in await tags.list_tags()] == ["Finance", "Legal", "Vendor"]


class TestUpdateTag:
    async def test_recolor_keeps_name(self, tags):
        tag = await tags.create_tag(TagCreateRequest(name="Legal"))

        updated = await tags.update_tag(tag.id, TagUpdateRequest(color="#722ed1"))

        assert updated.name == "Legal"
        assert updated.color == "#722ed1"

    async def test_rename_to_own_name_allowed(self, tags):
        tag = await tags.create_tag(TagCreateRequest(name="Legal"))
        updated = await tags.update_tag(tag.id, TagUpdateRequest(name="Legal"))
        assert updated.name == "Legal"

    async def test_rename_onto_existing(self, tags):
        await tags.create_tag(TagCreateRequest(name="Legal"))
        other = await tags.create_tag(TagCreateRequest(name="Finance"))

        with pytest.raises(DomainRuleViolation):
            await tags.update_tag(other.id, TagUpdateRequest(name="Legal"))

    async def test_missing(self, tags):
        with pytest.raises(NotFoundError):
            await tags.update_tag(404, TagUpdateRequest(color="#000"))


class TestDeleteTag:
    async def test_deleted(self, tags):
        tag = await tags.create_tag(TagCreateRequest(name="Legal"))

        await tags.delete_tag(tag.id)

        assert await tags.list_tags() == []

    async def test_missing(self, tags):
        with pytest.raises(NotFoundError):
            await tags.delete_tag(404)
