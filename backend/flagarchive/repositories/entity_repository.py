"""
FlagArchive Backend: Entity Repository (SQLAlchemy)
===================================================

What:  The `entities` table behind the EntityRepository contract.
How:   One SELECT/INSERT/UPDATE/DELETE per call, all inside the caller's
       transaction. The repository owns created_at/updated_at.

Query plans:
    get_by_id:         primary key lookup
    get_by_unique_id:  unique index on unique_id
    list_page:         ORDER BY id LIMIT/OFFSET, plus COUNT(*)
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from flagarchive.models.entity import FlagEntity
from flagarchive.repositories.base import DuplicateKeyError, EntityRepository, StorageError
from flagarchive.repositories.sql import SQLRepository, as_utc

logger = logging.getLogger(__name__)


class SQLEntityRepository(SQLRepository, EntityRepository):
    """EntityRepository over an AsyncSession."""

    async def get_by_id(self, entity_id: int, lock: bool = False) -> Optional[FlagEntity]:
        statement = select(FlagEntity).where(FlagEntity.id == entity_id)
        if lock:
            # SELECT ... FOR UPDATE; SQLite ignores it (it locks the whole file)
            statement = statement.with_for_update()
        result = await self._read(statement, "get entity by id")
        return result.scalar_one_or_none()

    async def get_by_unique_id(self, unique_id: str) -> Optional[FlagEntity]:
        result = await self._read(
            select(FlagEntity).where(FlagEntity.unique_id == unique_id),
            "get entity by unique_id",
        )
        return result.scalar_one_or_none()

    async def list_page(self, offset: int, limit: int) -> Tuple[List[FlagEntity], int]:
        # id ascending: the order is total and new rows only append, so
        # pages stay stable except for rows inserted mid-scan
        result = await self._read(
            select(FlagEntity).order_by(FlagEntity.id.asc()).offset(offset).limit(limit),
            "list entities",
        )
        entities = list(result.scalars().all())

        count_result = await self._read(
            select(func.count()).select_from(FlagEntity),
            "count entities",
        )
        total = count_result.scalar() or 0
        return entities, total

    async def insert(self, entity: FlagEntity) -> FlagEntity:
        now = self._clock()
        entity.created_at = now
        entity.updated_at = now
        self.session.add(entity)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # The UNIQUE index on unique_id is the only constraint a
            # validated row can violate.
            raise DuplicateKeyError(
                entity.unique_id,
                context=self._error_context("insert entity", exc),
            ) from exc
        except SQLAlchemyError as exc:
            raise StorageError(
                message="insert entity failed",
                context=self._error_context("insert entity", exc),
            ) from exc
        logger.debug("Inserted %r", entity)
        return entity

    async def update(self, entity: FlagEntity) -> FlagEntity:
        now = as_utc(self._clock())
        created_at = as_utc(entity.created_at)
        # A clock that stepped backwards must not break updated_at >= created_at
        entity.updated_at = now if now >= created_at else created_at
        await self._flush("update entity")
        return entity

    async def delete(self, entity: FlagEntity) -> None:
        try:
            await self.session.delete(entity)
        except SQLAlchemyError as exc:
            raise StorageError(
                message="delete entity failed",
                context=self._error_context("delete entity", exc),
            ) from exc
        await self._flush("delete entity")
