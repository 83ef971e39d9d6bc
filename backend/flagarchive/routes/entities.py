"""
FlagArchive Backend: Entity Route Handlers
==========================================

What:  POST/GET/PATCH/DELETE on /entities.
How:   Decode the request, delegate to EntityService, return the schema.
       Error kinds raised by the service are turned into status codes by the
       global handlers in main.py, never here.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from flagarchive.database import get_db_session
from flagarchive.schemas.common import ErrorResponse
from flagarchive.schemas.entity import EntityCreate, EntityPage, EntityResponse, EntityUpdate
from flagarchive.services.entity_service import entity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entities", tags=["Entities"])

_NOT_FOUND = {404: {"description": "Entity not found", "model": ErrorResponse}}
_BAD_INPUT = {400: {"description": "Invalid input", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "",
    response_model=EntityResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_BAD_INPUT,
        409: {"description": "unique_id already taken", "model": ErrorResponse},
        **_SERVER_ERROR,
    },
    summary="Create an entity",
)
async def create_entity(
    request: EntityCreate,
    db: AsyncSession = Depends(get_db_session),
) -> EntityResponse:
    return await entity_service.create_entity(db, request)


@router.get(
    "",
    response_model=EntityPage,
    responses={**_BAD_INPUT, **_SERVER_ERROR},
    summary="List entities, id ascending",
    description=(
        "Offset pagination with a zero-based page index. Sizes above the "
        "configured maximum are clamped, not rejected."
    ),
)
async def list_entities(
    response: Response,
    page: int = Query(default=0, description="Zero-based page index"),
    size: int | None = Query(default=None, description="Items per page (clamped to the maximum)"),
    db: AsyncSession = Depends(get_db_session),
) -> EntityPage:
    result = await entity_service.list_entities(db, page=page, size=size)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/{entity_id}",
    response_model=EntityResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a single entity by ID",
)
async def get_entity(
    entity_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> EntityResponse:
    return await entity_service.get_entity(db, entity_id)


@router.patch(
    "/{entity_id}",
    response_model=EntityResponse,
    responses={**_BAD_INPUT, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Partially update an entity",
    description="Only the fields present in the body change. unique_id cannot be changed.",
)
async def update_entity(
    entity_id: int,
    request: EntityUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> EntityResponse:
    return await entity_service.update_entity(db, entity_id, request)


@router.delete(
    "/{entity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete an entity",
)
async def delete_entity(
    entity_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await entity_service.delete_entity(db, entity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
