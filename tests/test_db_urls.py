from __future__ import annotations

from radar_backend.db_urls import (
    normalize_database_url_for_alembic,
    normalize_database_url_for_async,
)


def test_async_url_uses_async_drivers() -> None:
    assert normalize_database_url_for_async("sqlite:///./dev.db") == "sqlite+aiosqlite:///./dev.db"
    assert (
        normalize_database_url_for_async("sqlite+aiosqlite:///./dev.db")
        == "sqlite+aiosqlite:///./dev.db"
    )
    assert (
        normalize_database_url_for_async("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    )
    assert (
        normalize_database_url_for_async("postgresql+psycopg2://u:p@h/db")
        == "postgresql+psycopg://u:p@h/db"
    )
    assert normalize_database_url_for_async("  ") == ""


def test_alembic_url_strips_async_sqlite_driver() -> None:
    assert (
        normalize_database_url_for_alembic("sqlite+aiosqlite:////tmp/a.db") == "sqlite:////tmp/a.db"
    )
    assert (
        normalize_database_url_for_alembic("postgresql://u:p@h/db")
        == "postgresql+psycopg://u:p@h/db"
    )
