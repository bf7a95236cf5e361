from __future__ import annotations

from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from radar_backend.models import NotificationMessage as NotificationRow
from radar_backend.models import ensure_utc
from radar_backend.repositories import notifications_repo
from radar_backend.schemas import NotificationMessage
from radar_backend.store_guard import call_store


def _to_schema(row: NotificationRow) -> NotificationMessage:
    return NotificationMessage(
        id=row.id,
        title=row.title,
        message=row.message,
        created=ensure_utc(row.created),
    )


class SqlNotificationService:
    """Incremental message fetch over `notification_messages`.

    The watermark is exclusive: pass the returned value back to receive only
    newer messages. An empty batch returns the input watermark unchanged.
    """

    def __init__(self, session: AsyncSession, *, limit: int) -> None:
        self._session = session
        self._limit = int(limit)

    async def get_notification_messages(
        self, since: datetime
    ) -> tuple[list[NotificationMessage], datetime]:
        since_utc = ensure_utc(since)
        rows = await call_store(
            "notifications.since",
            lambda: notifications_repo.list_messages_since(
                self._session, since_utc, self._limit
            ),
        )
        messages = [_to_schema(r) for r in rows]
        watermark = messages[-1].created if messages else since_utc
        return messages, watermark
