"""Async engine, session factory and the unit-of-work runner.

Every balance-mutating operation goes through `run_in_transaction`: the work
function issues its statements on the caller's session, then the runner
commits, or rolls back on any exception. A lost balance race
(ConcurrencyConflictError) is retried a bounded number of times; every other
error propagates unchanged.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.rw_common.errors import (
    AppError,
    ConcurrencyConflictError,
    InternalError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL serialization_failure / deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def translate_db_error(exc: DBAPIError) -> AppError:
    """Map a driver-level failure onto the application error taxonomy."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES or "database is locked" in str(orig):
        return ConcurrencyConflictError()
    if exc.connection_invalidated or isinstance(exc, (OperationalError, InterfaceError)):
        return StorageUnavailableError(f"Storage unavailable: {orig}")
    return InternalError(f"Database error: {orig}")


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except (DBAPIError, OSError):
        # The original failure is re-raised by the caller; the session is discarded anyway.
        logger.exception("Rollback failed")


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
    max_attempts: int | None = None,
) -> T:
    """Run `work` as one atomic unit: commit on success, roll back on any error.

    ConcurrencyConflictError (raised by a compare-and-swap miss or translated
    from a serialization failure) is retried up to `max_attempts` total
    attempts, then surfaced to the caller. StorageUnavailableError is never
    retried.
    """
    attempts = max_attempts or settings.LEDGER_MAX_ATTEMPTS
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await work(db)
            await db.commit()
            return result
        except ConcurrencyConflictError:
            await _rollback(db)
            if attempt >= attempts:
                raise
            logger.warning(
                "Concurrency conflict, retrying unit of work (attempt %d/%d)",
                attempt,
                attempts,
            )
        except DBAPIError as exc:
            await _rollback(db)
            error = translate_db_error(exc)
            if isinstance(error, ConcurrencyConflictError) and attempt < attempts:
                logger.warning(
                    "Serialization failure, retrying unit of work (attempt %d/%d)",
                    attempt,
                    attempts,
                )
                continue
            raise error from exc
        except OSError as exc:
            await _rollback(db)
            raise StorageUnavailableError(f"Storage unavailable: {exc}") from exc
        except Exception:
            await _rollback(db)
            raise
