"""
FlagArchive Backend: User Repository (SQLAlchemy)
=================================================

Read-only access to the `users` table.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, select

from flagarchive.models.user import User
from flagarchive.repositories.base import UserRepository
from flagarchive.repositories.sql import SQLRepository


class SQLUserRepository(SQLRepository, UserRepository):

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self._read(select(User).where(User.id == user_id), "get user by id")
        return result.scalar_one_or_none()

    async def list_page(self, offset: int, limit: int) -> Tuple[List[User], int]:
        result = await self._read(
            select(User).order_by(User.id.asc()).offset(offset).limit(limit),
            "list users",
        )
        users = list(result.scalars().all())
        count_result = await self._read(select(func.count()).select_from(User), "count users")
        return users, count_result.scalar() or 0
