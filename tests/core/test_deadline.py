import asyncio

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from buddy.core.config import settings
from buddy.core.database import bounded, deadline
from buddy.core.exceptions import ConnectionFailureError, TermNotFoundError


async def test_returns_result_within_deadline():
    @bounded
    async def quick(value: int) -> int:
        return value * 2

    assert await quick(21) == 42


async def test_overrunning_deadline_raises_connection_failure(monkeypatch):
    monkeypatch.setattr(settings, "operation_timeout_seconds", 0.01)

    @bounded
    async def slow() -> None:
        await asyncio.sleep(1)

    with pytest.raises(ConnectionFailureError) as exc_info:
        await slow()

    assert exc_info.value.status_code == 503
    assert "timed out" in exc_info.value.message


async def test_lost_connection_raises_connection_failure():
    @bounded
    async def broken() -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(ConnectionFailureError) as exc_info:
        await broken()

    assert isinstance(exc_info.value.__cause__, OperationalError)


async def test_other_errors_propagate_unchanged():
    @bounded
    async def missing() -> None:
        raise TermNotFoundError(2024, 1)

    @bounded
    async def db_error() -> None:
        raise SQLAlchemyError("constraint failed")

    with pytest.raises(TermNotFoundError):
        await missing()
    with pytest.raises(SQLAlchemyError) as exc_info:
        await db_error()
    assert not isinstance(exc_info.value, ConnectionFailureError)


def test_keeps_function_metadata():
    @bounded
    async def documented() -> None:
        """Docstring."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Docstring."


async def test_deadline_block_raises_connection_failure(monkeypatch):
    monkeypatch.setattr(settings, "operation_timeout_seconds", 0.01)

    with pytest.raises(ConnectionFailureError) as exc_info:
        async with deadline("reject step"):
            await asyncio.sleep(1)

    assert isinstance(exc_info.value.__cause__, TimeoutError)


async def test_deadline_block_passes_other_errors_through():
    with pytest.raises(SQLAlchemyError) as exc_info:
        async with deadline("reject step"):
            raise SQLAlchemyError("constraint failed")

    assert not isinstance(exc_info.value, ConnectionFailureError)
