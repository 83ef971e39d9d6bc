"""
FlagArchive Backend: Entity Service (Business Logic Orchestrator)
=================================================================

What:  Create/read/update/delete/list for archive entities.
Why:   Encapsulates the entity invariants and the error taxonomy in one
       place, independent of HTTP concerns.
How:   Composes the validator, an EntityRepository and the mapper. Every
       failure leaves this class as exactly one FlagArchiveError subclass.
Who:   Called by the /entities route handlers.

Orchestration Flow (create):
    ┌──────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────┐
    │ Validate │───▶│ Lookup key   │───▶│ Insert        │───▶│ Map      │
    │          │    │ (fast path)  │    │ (UNIQUE index)│    │          │
    └──────────┘    └──────────────┘    └───────────────┘    └──────────┘
      BadInput         Conflict           Conflict / Internal

Design Decision:
    EntityService is stateless. It receives the request's session on every
    call and builds a repository around it, so concurrent requests share
    nothing but the database. Nothing is retried here; read retries belong
    to the repository's transport.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from flagarchive.database import in_id_range
from flagarchive.exceptions import (
    BadInputError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from flagarchive.repositories.base import DuplicateKeyError, EntityRepository, StorageError
from flagarchive.repositories.entity_repository import SQLEntityRepository
from flagarchive.schemas.entity import EntityCreate, EntityPage, EntityResponse, EntityUpdate
from flagarchive.services import mapper
from flagarchive.services.pagination import has_more, page_offset, resolve_page
from flagarchive.services.validator import (
    validate_create,
    validate_key_unchanged,
    validate_update,
)

logger = logging.getLogger(__name__)

RESOURCE = "entity"

RepositoryFactory = Callable[[AsyncSession], EntityRepository]


def _internal(operation: str, exc: StorageError, **context) -> InternalError:
    logger.error(
        "Storage failure during %s: %s | Context: %s",
        operation,
        exc.message,
        {**exc.context, **context},
    )
    return InternalError(context={"operation": operation, **context})


class EntityService:
    """
    Business logic layer for entity operations.

    Responsibilities:
        - create_entity(): validated insert with external-key uniqueness
        - get_entity():    single lookup with not-found handling
        - list_entities(): clamped, id-ordered pages with a total count
        - update_entity(): partial update of the fields the caller sent
        - delete_entity(): hard delete

    Args:
        repository_factory: Builds the repository for a session. Tests pass a
                            factory returning a mock.
    """

    def __init__(self, repository_factory: RepositoryFactory = SQLEntityRepository):
        self._repository_factory = repository_factory

    async def create_entity(self, db: AsyncSession, request: EntityCreate) -> EntityResponse:
        """
        Validate → check key → insert → map.

        Raises:
            BadInputError:  Request violates a field rule (→ 400)
            ConflictError:  unique_id already taken (→ 409). Raised both by the
                            lookup and by the store's UNIQUE index, so two
                            concurrent creates with one key cannot both win.
            InternalError:  Storage failed (→ 500)
        """
        violations = validate_create(request)
        if violations:
            raise BadInputError(
                message="Invalid entity data",
                violations=[v.as_dict() for v in violations],
            )

        repository = self._repository_factory(db)
        try:
            if await repository.get_by_unique_id(request.unique_id) is not None:
                raise ConflictError(resource=RESOURCE, value=request.unique_id)

            entity = await repository.insert(mapper.to_new_record(request))
        except DuplicateKeyError:
            # Lost the race against a concurrent insert of the same key
            logger.info("Concurrent create rejected for unique_id=%s", request.unique_id)
            raise ConflictError(resource=RESOURCE, value=request.unique_id)
        except StorageError as e:
            raise _internal("create", e, unique_id=request.unique_id)

        logger.info("Entity %s created (unique_id=%s)", entity.id, entity.unique_id)
        return mapper.to_response(entity)

    async def get_entity(self, db: AsyncSession, entity_id: int) -> EntityResponse:
        """
        Raises:
            NotFoundError:  No entity has this id (→ 404)
            InternalError:  Storage failed (→ 500)
        """
        if not in_id_range(entity_id):
            raise NotFoundError(resource=RESOURCE, resource_id=entity_id)

        repository = self._repository_factory(db)
        try:
            entity = await repository.get_by_id(entity_id)
        except StorageError as e:
            raise _internal("get", e, entity_id=entity_id)

        if entity is None:
            raise NotFoundError(resource=RESOURCE, resource_id=entity_id)
        return mapper.to_response(entity)

    async def list_entities(
        self,
        db: AsyncSession,
        page: int = 0,
        size: Optional[int] = None,
    ) -> EntityPage:
        """
        One page of entities, id ascending.

        Args:
            page: Zero-based page index; past the end gives an empty page
            size: Requested page size; clamped to settings.max_page_size

        Raises:
            BadInputError:  Negative page or non-positive size (→ 400)
            InternalError:  Storage failed (→ 500)
        """
        page, size = resolve_page(page, size)
        repository = self._repository_factory(db)
        try:
            entities, total_count = await repository.list_page(
                offset=page_offset(page, size), limit=size
            )
        except StorageError as e:
            raise _internal("list", e, page=page, size=size)

        return EntityPage(
            items=[mapper.to_response(entity) for entity in entities],
            page=page,
            size=size,
            total_count=total_count,
            has_more=has_more(page, size, total_count),
        )

    async def update_entity(
        self,
        db: AsyncSession,
        entity_id: int,
        request: EntityUpdate,
    ) -> EntityResponse:
        """
        Validate → fetch (row-locked) → apply sent fields → store → map.

        Fields the caller did not send keep their stored values. id and
        unique_id may be echoed back but never changed.

        Raises:
            BadInputError:  Request violates a field rule (→ 400)
            NotFoundError:  No entity has this id (→ 404)
            InternalError:  Storage failed (→ 500)
        """
        violations = validate_update(request, entity_id)
        if violations:
            raise BadInputError(
                message="Invalid entity data",
                violations=[v.as_dict() for v in violations],
            )
        if not in_id_range(entity_id):
            raise NotFoundError(resource=RESOURCE, resource_id=entity_id)

        repository = self._repository_factory(db)
        try:
            entity = await repository.get_by_id(entity_id, lock=True)
            if entity is None:
                raise NotFoundError(resource=RESOURCE, resource_id=entity_id)

            violations = validate_key_unchanged(request, entity.unique_id)
            if violations:
                raise BadInputError(
                    message="Invalid entity data",
                    violations=[v.as_dict() for v in violations],
                )

            fields = mapper.update_fields(request)
            entity = await repository.update(mapper.apply_update(entity, fields))
        except StorageError as e:
            raise _internal("update", e, entity_id=entity_id)

        logger.info("Entity %s updated (fields=%s)", entity_id, sorted(fields))
        return mapper.to_response(entity)

    async def delete_entity(self, db: AsyncSession, entity_id: int) -> None:
        """
        Raises:
            NotFoundError:  No entity has this id, including one already
                            deleted (→ 404)
            InternalError:  Storage failed (→ 500)
        """
        if not in_id_range(entity_id):
            raise NotFoundError(resource=RESOURCE, resource_id=entity_id)

        repository = self._repository_factory(db)
        try:
            entity = await repository.get_by_id(entity_id, lock=True)
            if entity is None:
                raise NotFoundError(resource=RESOURCE, resource_id=entity_id)
            await repository.delete(entity)
        except StorageError as e:
            raise _internal("delete", e, entity_id=entity_id)

        logger.info("Entity %s deleted", entity_id)


# ── Singleton Instance ────────────────────────────────────────────────────
entity_service = EntityService()
