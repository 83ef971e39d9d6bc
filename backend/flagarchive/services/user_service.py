"""
FlagArchive Backend: User Service
=================================

What:  Read-only access to archive users.
How:   Same shape as EntityService: stateless, one repository per call,
       None → NotFoundError, StorageError → InternalError.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from flagarchive.database import in_id_range
from flagarchive.exceptions import InternalError, NotFoundError
from flagarchive.repositories.base import StorageError, UserRepository
from flagarchive.repositories.user_repository import SQLUserRepository
from flagarchive.schemas.user import UserPage, UserResponse
from flagarchive.services import mapper
from flagarchive.services.pagination import has_more, page_offset, resolve_page

logger = logging.getLogger(__name__)


class UserService:

    def __init__(
        self,
        repository_factory: Callable[[AsyncSession], UserRepository] = SQLUserRepository,
    ):
        self._repository_factory = repository_factory

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        if not in_id_range(user_id):
            raise NotFoundError(resource="user", resource_id=user_id)
        try:
            user = await self._repository_factory(db).get_by_id(user_id)
        except StorageError as e:
            logger.error("Storage failure fetching user %s: %s | Context: %s", user_id, e.message, e.context)
            raise InternalError(context={"operation": "get_user", "user_id": user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return mapper.to_user_response(user)

    async def list_users(
        self,
        db: AsyncSession,
        page: int = 0,
        size: Optional[int] = None,
    ) -> UserPage:
        page, size = resolve_page(page, size)
        try:
            users, total_count = await self._repository_factory(db).list_page(
                offset=page_offset(page, size), limit=size
            )
        except StorageError as e:
            logger.error("Storage failure listing users: %s | Context: %s", e.message, e.context)
            raise InternalError(context={"operation": "list_users", "page": page, "size": size})

        return UserPage(
            items=[mapper.to_user_response(user) for user in users],
            page=page,
            size=size,
            total_count=total_count,
            has_more=has_more(page, size, total_count),
        )


user_service = UserService()
