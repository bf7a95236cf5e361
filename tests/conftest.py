from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from radar_backend.config import settings
from radar_backend.db import close_engine, dispose_engine_cache, init_db


@pytest.fixture
def anyio_backend() -> str:
    # The store stack (SQLAlchemy asyncio + aiosqlite) is asyncio-only.
    return "asyncio"


@pytest.fixture(autouse=True)
async def _close_engine_per_test(  # pyright: ignore[reportUnusedFunction]
    anyio_backend: object,  # noqa: ARG001
) -> AsyncGenerator[None, None]:
    # Dispose the cached AsyncEngine (aiosqlite worker thread) while the
    # per-test event loop is still alive.
    _ = anyio_backend
    yield
    await close_engine()


@pytest.fixture
async def sqlite_db(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Point settings at a fresh SQLite file with the schema created."""

    old_db = settings.database_url
    await close_engine()
    settings.database_url = f"sqlite:///{tmp_path / 'test-radar.db'}"
    try:
        await init_db()
        yield settings.database_url
    finally:
        await close_engine()
        settings.database_url = old_db


def pytest_sessionfinish(session: object, exitstatus: int) -> None:  # noqa: ARG001
    # Safety net: close cached engine so CI can exit cleanly.
    _ = session, exitstatus
    dispose_engine_cache()
