from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio
from sqlalchemy import exc as sa_exc

from radar_backend.config import settings
from radar_backend.errors import StoreError, StoreOverloadedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Driver messages that mean "back off", not "broken".
_OVERLOAD_MARKERS = (
    "too many connections",
    "remaining connection slots are reserved",
    "database is locked",
)


def is_overload(exc: BaseException) -> bool:
    if isinstance(exc, sa_exc.TimeoutError):
        # QueuePool exhausted.
        return True
    text = str(exc).lower()
    return any(marker in text for marker in _OVERLOAD_MARKERS)


async def call_store(operation: str, func: Callable[[], Awaitable[T]]) -> T:
    """Run a store call under the upstream timeout and translate its failures.

    Raises StoreOverloadedError for resource exhaustion and StoreError for
    every other SQLAlchemy failure or a timeout.
    """

    timeout_s = float(settings.upstream_timeout_seconds)
    try:
        with anyio.fail_after(timeout_s if timeout_s > 0 else None):
            return await func()
    except sa_exc.SQLAlchemyError as exc:
        if is_overload(exc):
            logger.warning("store overloaded operation=%s", operation)
            raise StoreOverloadedError(f"{operation}: store overloaded") from exc
        raise StoreError(f"{operation}: {exc.__class__.__name__}") from exc
    except TimeoutError as exc:
        raise StoreError(f"{operation}: timed out after {timeout_s}s") from exc
