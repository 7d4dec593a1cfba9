"""Row conversion and error translation shared by the SQLite stores."""

import functools
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import ParamSpec, TypeVar

import aiosqlite

from src.config import get_logger
from src.core.exceptions import DatabaseError, ValidationError

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO timestamp column; NULL or garbage yields None."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def to_iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


def db_operation(
    operation: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Translate raw aiosqlite errors raised by a store method.

    Constraint violations (duplicate order number, unknown foreign key)
    become ValidationError; everything else becomes DatabaseError.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except aiosqlite.IntegrityError as e:
                logger.warning("database_constraint_violated", operation=operation, error=str(e))
                raise ValidationError(operation, f"constraint violated: {e}") from e
            except aiosqlite.Error as e:
                logger.error("database_operation_failed", operation=operation, error=str(e))
                raise DatabaseError(operation, str(e)) from e

        return wrapper

    return decorator
