from __future__ import annotations

import anyio
import pytest
from sqlalchemy import exc as sa_exc

from radar_backend.config import settings
from radar_backend.db import session_scope
from radar_backend.errors import StoreError, StoreOverloadedError
from radar_backend.models import User
from radar_backend.services.users_service import SqlUserRepository
from radar_backend.store_guard import call_store


@pytest.mark.anyio
async def test_exists_reflects_users_table(sqlite_db: str) -> None:
    _ = sqlite_db
    async with session_scope() as session:
        session.add(User(id="known-uuid", user_major="1", user_minor="2"))
        await session.commit()

    async with session_scope() as session:
        repo = SqlUserRepository(session)
        assert await repo.exists("known-uuid") is True
        assert await repo.exists("unknown-uuid") is False


@pytest.mark.anyio
async def test_pool_timeout_is_overload() -> None:
    async def exhausted() -> bool:
        raise sa_exc.TimeoutError("QueuePool limit of size 5 overflow 10 reached")

    with pytest.raises(StoreOverloadedError):
        await call_store("users.exists", exhausted)


@pytest.mark.anyio
async def test_too_many_connections_is_overload() -> None:
    async def refused() -> bool:
        raise sa_exc.OperationalError(
            "SELECT 1", {}, Exception("FATAL: sorry, too many connections for role")
        )

    with pytest.raises(StoreOverloadedError):
        await call_store("users.exists", refused)


@pytest.mark.anyio
async def test_other_store_errors_are_plain_store_errors() -> None:
    async def missing_table() -> bool:
        raise sa_exc.OperationalError("SELECT 1", {}, Exception("no such table: users"))

    with pytest.raises(StoreError) as excinfo:
        await call_store("users.exists", missing_table)
    assert not isinstance(excinfo.value, StoreOverloadedError)


@pytest.mark.anyio
async def test_slow_store_call_times_out_as_store_error() -> None:
    old_timeout = settings.upstream_timeout_seconds
    try:
        settings.upstream_timeout_seconds = 0.05

        async def slow() -> bool:
            await anyio.sleep(5)
            return True

        with pytest.raises(StoreError) as excinfo:
            await call_store("users.exists", slow)
        assert "timed out" in str(excinfo.value)
    finally:
        settings.upstream_timeout_seconds = old_timeout
