"""
FlagArchive Backend: User Route Handlers
========================================

Read-only: GET /users and GET /users/{id}.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from flagarchive.database import get_db_session
from flagarchive.schemas.common import ErrorResponse
from flagarchive.schemas.user import UserPage, UserResponse
from flagarchive.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserPage, summary="List users, id ascending")
async def list_users(
    response: Response,
    page: int = Query(default=0, description="Zero-based page index"),
    size: int | None = Query(default=None, description="Items per page (clamped to the maximum)"),
    db: AsyncSession = Depends(get_db_session),
) -> UserPage:
    result = await user_service.list_users(db, page=page, size=size)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a single user by ID",
)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db_session)) -> UserResponse:
    return await user_service.get_user(db, user_id)
