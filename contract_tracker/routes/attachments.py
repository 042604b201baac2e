"""
Contract Tracker — Attachment API routes.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from contract_tracker.config import settings
from contract_tracker.routes import get_actor_id, get_attachment_service
from contract_tracker.schemas.contract import AttachmentResponse
from contract_tracker.services.attachments import AttachmentService

attachment_router = APIRouter(prefix="/attachments", tags=["attachments"])


@attachment_router.post(
    "/upload/{contract_id}", response_model=AttachmentResponse, status_code=201
)
async def upload_attachment(
    contract_id: int,
    file: UploadFile = File(...),
    actor_id: int = Depends(get_actor_id),
    service: AttachmentService = Depends(get_attachment_service),
):
    # one byte past the limit is enough to reject an oversized upload
    content = await file.read(settings.max_upload_bytes + 1)
    return await service.upload(
        contract_id, file.filename or "file", content, file.content_type
    )


@attachment_router.get("/contract/{contract_id}", response_model=list[AttachmentResponse])
async def list_attachments(
    contract_id: int,
    service: AttachmentService = Depends(get_attachment_service),
):
    return await service.list_for_contract(contract_id)


@attachment_router.get("/{attachment_id}/download")
async def download_attachment(
    attachment_id: int,
    service: AttachmentService = Depends(get_attachment_service),
):
    attachment, path = await service.resolve_download(attachment_id)
    return FileResponse(
        path,
        media_type=attachment.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.file_name)}"
        },
    )


@attachment_router.delete("/{attachment_id}", status_code=204)
async def delete_attachment(
    attachment_id: int,
    actor_id: int = Depends(get_actor_id),
    service: AttachmentService = Depends(get_attachment_service),
):
    await service.delete(attachment_id)
