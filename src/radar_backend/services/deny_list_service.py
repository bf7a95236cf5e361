from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import Request

from radar_backend.config import settings
from radar_backend.db import session_scope
from radar_backend.models import DenyListEntry, utc_now
from radar_backend.repositories import deny_list_repo

logger = logging.getLogger(__name__)


_last_cleanup: datetime | None = None


def extract_client_ip(request: Request) -> str | None:
    if settings.trust_x_forwarded_for:
        raw = request.headers.get("x-forwarded-for")
        if raw:
            # Take the left-most (original) client IP.
            first = raw.split(",")[0].strip()
            if first:
                return first
    if request.client:
        return request.client.host
    return None


def build_deny_key(ip: str | None) -> str:
    v = (ip or "").strip() or "unknown"
    return f"ip:{v}"[:128]


def _cleanup_due(now: datetime) -> bool:
    interval_s = int(settings.deny_list_cleanup_interval_seconds)
    if interval_s <= 0:
        return False
    if _last_cleanup is not None and now - _last_cleanup < timedelta(seconds=interval_s):
        return False
    return True


def _mark_cleanup(now: datetime) -> None:
    # Only after a committed prune, so a failed one is retried on the next record.
    global _last_cleanup
    _last_cleanup = now


class SqlDenyListRecorder:
    """Records rejected callers in `deny_list_entries`.

    Writes go through their own session so a failing insert can never roll
    back or alter the response of the request being rejected.
    """

    async def record(self, request: Request, reason: str) -> None:
        ttl_s = int(settings.deny_list_ttl_seconds)
        if ttl_s <= 0:
            return

        now = utc_now()
        ip = extract_client_ip(request)
        entry = DenyListEntry(
            key=build_deny_key(ip),
            reason=reason[:50],
            method=request.method.upper()[:16],
            path=request.url.path,
            client_ip=ip,
            user_agent=request.headers.get("user-agent"),
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_s),
        )
        request_id = getattr(request.state, "request_id", None)
        try:
            async with session_scope() as session:
                deny_list_repo.add_entry(session, entry)
                prune = _cleanup_due(now)
                if prune:
                    await deny_list_repo.delete_expired(session, now)
                await session.commit()
            if prune:
                _mark_cleanup(now)
        except Exception:
            logger.warning(
                "deny list record failed request_id=%s reason=%s",
                request_id,
                reason,
                exc_info=True,
            )
            return
        logger.info("deny list recorded request_id=%s key=%s reason=%s", request_id, entry.key, reason)
