"""
Contract Tracker — Contract & contract-field API routes.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from contract_tracker.routes import get_actor_id, get_contract_service
from contract_tracker.schemas.contract import (
    AuditLogResponse,
    ContractCreateRequest,
    ContractDetailResponse,
    ContractListResponse,
    ContractQuery,
    ContractResponse,
    ContractUpdateRequest,
    FieldCreateRequest,
    FieldResponse,
    FieldUpdateRequest,
    StatsResponse,
)
from contract_tracker.services import audit
from contract_tracker.services.contract_service import ContractService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/contracts", tags=["contracts"])
field_router = APIRouter(prefix="/contract-fields", tags=["contract-fields"])


# ═══════════════════════════════════════════════════════
#  Contract CRUD
# ═══════════════════════════════════════════════════════

@router.get("", response_model=ContractListResponse)
async def list_contracts(
    query: Annotated[ContractQuery, Query()],
    service: ContractService = Depends(get_contract_service),
):
    """List contracts with status / search filters, sorting and paging."""
    return await service.list_contracts(query)


@router.post("", response_model=ContractResponse, status_code=201)
async def create_contract(
    req: ContractCreateRequest,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    return await service.create(req, actor_id)


@router.get("/stats", response_model=StatsResponse)
async def contract_stats(service: ContractService = Depends(get_contract_service)):
    """Dashboard counts, status distribution and 6-month expiry trend."""
    return await service.stats()


@router.get("/expiring", response_model=list[ContractResponse])
async def expiring_contracts(
    days: int = Query(30, ge=0, le=3650),
    service: ContractService = Depends(get_contract_service),
):
    return await service.get_expiring(days)


@router.get("/unprocessed", response_model=list[ContractResponse])
async def unprocessed_contracts(service: ContractService = Depends(get_contract_service)):
    return await service.get_unprocessed_expired()


@router.get("/{contract_id}", response_model=ContractDetailResponse)
async def get_contract(
    contract_id: int,
    service: ContractService = Depends(get_contract_service),
):
    """A single contract with attachments and its audit history."""
    contract = await service.get(contract_id)
    logs = await service.get_logs(contract_id)
    detail = ContractDetailResponse.model_validate(contract)
    detail.logs = [
        AuditLogResponse.model_validate(audit.to_response(log, contract.name))
        for log in logs
    ]
    return detail


@router.patch("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: int,
    req: ContractUpdateRequest,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    return await service.update(contract_id, req, actor_id)


@router.post("/{contract_id}/process", response_model=ContractResponse)
async def mark_processed(
    contract_id: int,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    return await service.mark_processed(contract_id, actor_id)


@router.delete("/{contract_id}", status_code=204)
async def delete_contract(
    contract_id: int,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    await service.delete(contract_id, actor_id)


# ═══════════════════════════════════════════════════════
#  Contract fields
# ═══════════════════════════════════════════════════════

@field_router.get("", response_model=list[FieldResponse])
async def list_fields(service: ContractService = Depends(get_contract_service)):
    return await service.get_fields()


@field_router.post("", response_model=FieldResponse, status_code=201)
async def create_field(
    req: FieldCreateRequest,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    field = await service.create_field(req)
    logger.info(f"Field {field.key} added by user {actor_id}")
    return field


@field_router.patch("/{field_id}", response_model=FieldResponse)
async def update_field(
    field_id: int,
    req: FieldUpdateRequest,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    return await service.update_field(field_id, req)


@field_router.delete("/{field_id}", status_code=204)
async def delete_field(
    field_id: int,
    actor_id: int = Depends(get_actor_id),
    service: ContractService = Depends(get_contract_service),
):
    await service.delete_field(field_id)
