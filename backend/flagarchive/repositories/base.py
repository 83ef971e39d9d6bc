"""
FlagArchive Backend: Storage Gateway Interfaces
===============================================

What:  Abstract repositories that the services depend on, plus the storage
       errors they are allowed to raise.
Why:   Services must not know which store sits behind them. They only see
       typed records, `None` for "no such row", and two error types.
How:   Concrete SQLAlchemy implementations live next to this module; unit
       tests substitute AsyncMock objects that follow the same contract.

Contract shared by every implementation:
    - Lookups return the record or None. A missing row is never a default
      or empty record.
    - insert() raises DuplicateKeyError when the store's own uniqueness
      constraint rejects the row. That constraint is the real guard; any
      lookup a caller does first is only a fast path.
    - Every other store failure is raised as StorageError.
    - Each method runs inside the caller's transaction; nothing is committed
      here.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from flagarchive.models.entity import FlagEntity
from flagarchive.models.user import User


class StorageError(Exception):
    """
    Raised when the store fails for a reason the caller cannot fix.

    `context` holds driver-level detail for the logs.
    """

    def __init__(self, message: str = "Storage operation failed", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DuplicateKeyError(StorageError):
    """Raised when the store rejects a row because its unique key already exists."""

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        self.key = key
        super().__init__(message=f"Duplicate key '{key}'", context=context)


class EntityRepository(ABC):
    """Storage capabilities for archive entities."""

    @abstractmethod
    async def get_by_id(self, entity_id: int, lock: bool = False) -> Optional[FlagEntity]:
        """
        Fetch one entity by its identifier.

        Args:
            entity_id: Storage-assigned identifier
            lock:      Hold a row lock until the transaction ends, so a
                       read-modify-write cannot interleave with another one
        """

    @abstractmethod
    async def get_by_unique_id(self, unique_id: str) -> Optional[FlagEntity]:
        """Fetch one entity by its business key."""

    @abstractmethod
    async def list_page(self, offset: int, limit: int) -> Tuple[List[FlagEntity], int]:
        """Return up to `limit` entities ordered by id ascending, plus the total count."""

    @abstractmethod
    async def insert(self, entity: FlagEntity) -> FlagEntity:
        """Persist a new entity; assigns id and timestamps."""

    @abstractmethod
    async def update(self, entity: FlagEntity) -> FlagEntity:
        """Persist changes made to a fetched entity; advances updated_at."""

    @abstractmethod
    async def delete(self, entity: FlagEntity) -> None:
        """Remove a fetched entity."""


class UserRepository(ABC):
    """Read-only storage capabilities for users."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Fetch one user by identifier."""

    @abstractmethod
    async def list_page(self, offset: int, limit: int) -> Tuple[List[User], int]:
        """Return up to `limit` users ordered by id ascending, plus the total count."""
