"""
FlagArchive Backend: Shared SQLAlchemy Repository Plumbing
==========================================================

What:  Statement execution, transport retry and error wrapping shared by the
       concrete repositories.
Why:   Every repository must turn SQLAlchemy exceptions into the two storage
       errors of the gateway contract, and every read should survive a
       dropped pooled connection. Doing that once keeps each repository
       down to its queries.

Resilience Strategy (reads only):
    1. A read that fails with a transient, connection-level error
       (OperationalError, or any DBAPIError that invalidated its connection)
       is retried by tenacity with exponential backoff and jitter.
    2. The session is rolled back before each retry so the next attempt
       checks out a fresh connection.
    3. Writes are never retried: the caller's transaction decides.

    Rolling back discards anything already flushed in the transaction, so the
    services always issue their reads before their writes.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from flagarchive.config import settings
from flagarchive.repositories.base import StorageError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


# sqlite3 raises OverflowError for integers it cannot bind, outside the DBAPI
# exception hierarchy that SQLAlchemy wraps.
DRIVER_ERRORS = (SQLAlchemyError, OverflowError)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC so they compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_transient(exc: BaseException) -> bool:
    """True for failures where a fresh connection may succeed."""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


class SQLRepository:
    """
    Base for repositories backed by an AsyncSession.

    Args:
        session:         The request's session; this class never commits it
        clock:           Source of timestamps (injectable for tests)
        retry_attempts:  Total attempts for a read (default from settings)
        retry_min_wait:  First backoff in seconds, also the jitter bound
        retry_max_wait:  Backoff ceiling in seconds
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Optional[Clock] = None,
        retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
    ):
        self.session = session
        self._clock = clock or utc_now
        self._retry_attempts = retry_attempts or settings.db_retry_max_attempts
        self._retry_min_wait = (
            settings.db_retry_min_wait if retry_min_wait is None else retry_min_wait
        )
        self._retry_max_wait = (
            settings.db_retry_max_wait if retry_max_wait is None else retry_max_wait
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential_jitter(
                initial=self._retry_min_wait,
                max=self._retry_max_wait,
                jitter=self._retry_min_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _read(self, statement: Any, operation: str) -> Any:
        """Execute a read-only statement with transport retry."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    try:
                        return await self.session.execute(statement)
                    except SQLAlchemyError as exc:
                        if is_transient(exc):
                            await self.session.rollback()
                        raise
        except DRIVER_ERRORS as exc:
            raise StorageError(
                message=f"{operation} failed",
                context=self._error_context(operation, exc),
            ) from exc

    async def _flush(self, operation: str) -> None:
        """Flush pending writes, wrapping any store failure."""
        try:
            await self.session.flush()
        except DRIVER_ERRORS as exc:
            raise StorageError(
                message=f"{operation} failed",
                context=self._error_context(operation, exc),
            ) from exc

    @staticmethod
    def _error_context(operation: str, exc: BaseException) -> Dict[str, Any]:
        return {
            "operation": operation,
            "error_type": type(exc).__name__,
            "error": str(exc),
        }
