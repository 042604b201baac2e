"""
Contract Tracker — Tag API routes.
"""

from fastapi import APIRouter, Depends

from contract_tracker.routes import get_actor_id, get_tag_service
from contract_tracker.schemas.tag import TagCreateRequest, TagResponse, TagUpdateRequest
from contract_tracker.services.tags import TagService

tag_router = APIRouter(prefix="/tags", tags=["tags"])


@tag_router.get("", response_model=list[TagResponse])
async def list_tags(service: TagService = Depends(get_tag_service)):
    """All tags, by name."""
    return await service.list_tags()


@tag_router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    req: TagCreateRequest,
    actor_id: int = Depends(get_actor_id),
    service: TagService = Depends(get_tag_service),
):
    return await service.create_tag(req)


@tag_router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: int,
    req: TagUpdateRequest,
    actor_id: int = Depends(get_actor_id),
    service: TagService = Depends(get_tag_service),
):
    return await service.update_tag(tag_id, req)


@tag_router.delete("/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: int,
    actor_id: int = Depends(get_actor_id),
    service: TagService = Depends(get_tag_service),
):
    await service.delete_tag(tag_id)
