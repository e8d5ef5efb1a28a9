"""
Livestock resource router.

One endpoint per persistence verb on the livestock collection. Payloads are
validated against the generated contract models before the service is
called; results are mapped back to the same contract's read model.
"""

import uuid
from typing import List

import structlog
from fastapi import APIRouter, Depends, Response, status
from livestock_contracts.livestock import (
    LivestockBatchCreate,
    LivestockCreate,
    LivestockPage,
    LivestockPatch,
    LivestockRead,
    LivestockReplace,
)
from pydantic import BaseModel

from ..dependencies import get_livestock_filter, get_livestock_service
from ..domain.entities import to_dto
from ..metrics import track_operation
from ..services.livestock_service import LivestockService
from .errors import ErrorResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/livestock", tags=["livestock"])

NOT_FOUND = {404: {"description": "Livestock not found", "model": ErrorResponse}}
INVALID = {422: {"description": "Payload fails the contract", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Business rule violated", "model": ErrorResponse}}


@router.get(
    "",
    response_model=LivestockPage,
    responses=INVALID,
    summary="List livestock",
)
async def list_livestock(
    query: BaseModel = Depends(get_livestock_filter),
    service: LivestockService = Depends(get_livestock_service),
):
    """List records, optionally filtered by type, sex, status, tag or dam."""
    with track_operation("list"):
        items, total = await service.list(query)
    return LivestockPage(
        items=[to_dto(item) for item in items],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get(
    "/{livestock_id}",
    response_model=LivestockRead,
    responses={**NOT_FOUND, **INVALID},
    summary="Get livestock by id",
)
async def get_livestock(
    livestock_id: uuid.UUID,
    service: LivestockService = Depends(get_livestock_service),
):
    """Get a single record."""
    with track_operation("get"):
        entity = await service.get(str(livestock_id))
    return to_dto(entity)


@router.post(
    "",
    response_model=LivestockRead,
    status_code=status.HTTP_201_CREATED,
    responses={**INVALID, **CONFLICT},
    summary="Create livestock",
)
async def create_livestock(
    payload: LivestockCreate,
    service: LivestockService = Depends(get_livestock_service),
):
    """Create a record; the response carries the generated id."""
    with track_operation("create"):
        entity = await service.create(payload)
    return to_dto(entity)


@router.post(
    "/batch",
    response_model=List[LivestockRead],
    status_code=status.HTTP_201_CREATED,
    responses={**INVALID, **CONFLICT},
    summary="Create several livestock records atomically",
)
async def create_livestock_batch(
    payload: LivestockBatchCreate,
    service: LivestockService = Depends(get_livestock_service),
):
    """Create all records or none of them."""
    with track_operation("create_batch"):
        entities = await service.create_batch(payload.items)
    return [to_dto(entity) for entity in entities]


@router.put(
    "/{livestock_id}",
    response_model=LivestockRead,
    responses={**NOT_FOUND, **INVALID, **CONFLICT},
    summary="Replace livestock",
)
async def replace_livestock(
    livestock_id: uuid.UUID,
    payload: LivestockReplace,
    service: LivestockService = Depends(get_livestock_service),
):
    """Replace every field of a record."""
    with track_operation("replace"):
        entity = await service.replace(str(livestock_id), payload)
    return to_dto(entity)


@router.patch(
    "/{livestock_id}",
    response_model=LivestockRead,
    responses={**NOT_FOUND, **INVALID, **CONFLICT},
    summary="Update livestock",
)
async def patch_livestock(
    livestock_id: uuid.UUID,
    payload: LivestockPatch,
    service: LivestockService = Depends(get_livestock_service),
):
    """Change the fields present in the payload."""
    with track_operation("patch"):
        entity = await service.patch(str(livestock_id), payload)
    return to_dto(entity)


@router.delete(
    "/{livestock_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete livestock",
)
async def delete_livestock(
    livestock_id: uuid.UUID,
    service: LivestockService = Depends(get_livestock_service),
):
    """Delete a record; offspring keep existing without a dam."""
    with track_operation("delete"):
        await service.delete(str(livestock_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
