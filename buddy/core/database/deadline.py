"""Per-operation deadline for ledger calls."""

import asyncio
import functools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError

from buddy.core.config import settings
from buddy.core.exceptions import ConnectionFailureError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


@asynccontextmanager
async def deadline(operation: str) -> AsyncIterator[None]:
    """
    Run the block under the configured operation deadline.

    Overrunning the deadline, or losing the database connection, raises
    ConnectionFailureError. Any other error propagates unchanged.
    """
    timeout = settings.operation_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as e:
        logger.warning("%s exceeded the %.2fs deadline", operation, timeout)
        raise ConnectionFailureError(f"Operation timed out after {timeout:g}s") from e
    except (OperationalError, InterfaceError) as e:
        logger.error("%s lost the database connection: %s", operation, e)
        raise ConnectionFailureError() from e


def bounded(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Run each call of a coroutine function under its own deadline."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        async with deadline(func.__qualname__):
            return await func(*args, **kwargs)

    return wrapper
