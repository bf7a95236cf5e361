from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import Request
from sqlmodel import select

from radar_backend.config import settings
from radar_backend.db import get_engine, session_scope
from radar_backend.models import DenyListEntry, ensure_utc, utc_now
from radar_backend.services import deny_list_service
from radar_backend.services.deny_list_service import SqlDenyListRecorder, build_deny_key


def _request(*, client_ip: str = "10.0.0.5", forwarded_for: str | None = None) -> Request:
    headers: list[tuple[bytes, bytes]] = [(b"user-agent", b"radar-ios/1.0")]
    if forwarded_for is not None:
        headers.append((b"x-forwarded-for", forwarded_for.encode("latin-1")))
    return Request(
        {
            "type": "http",
            "method": "PUT",
            "path": "/api/Notification/Pull",
            "query_string": b"",
            "headers": headers,
            "client": (client_ip, 4711),
            "state": {"request_id": "rid-deny"},
        }
    )


async def _entries() -> list[DenyListEntry]:
    async with session_scope() as session:
        return list(await session.exec(select(DenyListEntry)))


def test_build_deny_key() -> None:
    assert build_deny_key("1.2.3.4") == "ip:1.2.3.4"
    assert build_deny_key(None) == "ip:unknown"
    assert build_deny_key("  ") == "ip:unknown"


@pytest.mark.anyio
async def test_record_writes_entry_with_expiry(sqlite_db: str) -> None:
    _ = sqlite_db
    old_ttl = settings.deny_list_ttl_seconds
    try:
        settings.deny_list_ttl_seconds = 3600
        await SqlDenyListRecorder().record(_request(), "unsupported_method")
    finally:
        settings.deny_list_ttl_seconds = old_ttl

    rows = await _entries()
    assert len(rows) == 1
    row = rows[0]
    assert row.key == "ip:10.0.0.5"
    assert row.reason == "unsupported_method"
    assert row.method == "PUT"
    assert row.path == "/api/Notification/Pull"
    assert row.user_agent == "radar-ios/1.0"
    ttl = ensure_utc(row.expires_at) - ensure_utc(row.created_at)
    assert ttl == timedelta(seconds=3600)


@pytest.mark.anyio
async def test_forwarded_for_only_when_trusted(sqlite_db: str) -> None:
    _ = sqlite_db
    old_trust = settings.trust_x_forwarded_for
    try:
        settings.trust_x_forwarded_for = False
        await SqlDenyListRecorder().record(_request(forwarded_for="9.9.9.9"), "validation_failed")
        settings.trust_x_forwarded_for = True
        await SqlDenyListRecorder().record(
            _request(forwarded_for="9.9.9.9, 10.0.0.1"), "validation_failed"
        )
    finally:
        settings.trust_x_forwarded_for = old_trust

    keys = sorted(r.key for r in await _entries())
    assert keys == ["ip:10.0.0.5", "ip:9.9.9.9"]


@pytest.mark.anyio
async def test_zero_ttl_disables_recording(sqlite_db: str) -> None:
    _ = sqlite_db
    old_ttl = settings.deny_list_ttl_seconds
    try:
        settings.deny_list_ttl_seconds = 0
        await SqlDenyListRecorder().record(_request(), "already_registered")
    finally:
        settings.deny_list_ttl_seconds = old_ttl

    assert await _entries() == []


@pytest.mark.anyio
async def test_expired_entries_are_pruned(sqlite_db: str) -> None:
    _ = sqlite_db
    now = utc_now()
    async with session_scope() as session:
        session.add(
            DenyListEntry(
                key="ip:old",
                reason="validation_failed",
                method="GET",
                path="/x",
                created_at=now - timedelta(days=2),
                expires_at=now - timedelta(days=1),
            )
        )
        await session.commit()

    deny_list_service._last_cleanup = None  # pyright: ignore[reportPrivateUsage]
    await SqlDenyListRecorder().record(_request(), "already_registered")

    keys = [r.key for r in await _entries()]
    assert keys == ["ip:10.0.0.5"]


@pytest.mark.anyio
async def test_record_failure_is_swallowed(
    sqlite_db: str, caplog: pytest.LogCaptureFixture
) -> None:
    _ = sqlite_db
    async with get_engine().begin() as conn:
        await conn.run_sync(lambda c: DenyListEntry.__table__.drop(c))  # pyright: ignore[reportAttributeAccessIssue]

    with caplog.at_level("WARNING", logger="radar_backend.services.deny_list_service"):
        await SqlDenyListRecorder().record(_request(), "unsupported_method")

    assert any("deny list record failed" in r.getMessage() for r in caplog.records)


@pytest.mark.anyio
async def test_failed_prune_is_retried_on_next_record(sqlite_db: str) -> None:
    _ = sqlite_db
    async with get_engine().begin() as conn:
        await conn.run_sync(lambda c: DenyListEntry.__table__.drop(c))  # pyright: ignore[reportAttributeAccessIssue]

    deny_list_service._last_cleanup = None  # pyright: ignore[reportPrivateUsage]
    await SqlDenyListRecorder().record(_request(), "unsupported_method")

    assert deny_list_service._last_cleanup is None  # pyright: ignore[reportPrivateUsage]


@pytest.mark.anyio
async def test_successful_prune_is_throttled(sqlite_db: str) -> None:
    _ = sqlite_db
    deny_list_service._last_cleanup = None  # pyright: ignore[reportPrivateUsage]
    await SqlDenyListRecorder().record(_request(), "unsupported_method")

    assert deny_list_service._last_cleanup is not None  # pyright: ignore[reportPrivateUsage]
