from __future__ import annotations

from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import NotificationMessage


async def list_messages_since(
    session: AsyncSession, since: datetime, limit: int
) -> list[NotificationMessage]:
    """Messages with created > since, ascending by (created, id).

    `limit` caps the batch but never splits a group sharing one `created`
    value, so an exclusive watermark taken from the last row skips nothing.
    """

    q = (
        select(NotificationMessage)
        .where(NotificationMessage.created > since)
        .order_by(NotificationMessage.created, NotificationMessage.id)
    )
    if limit > 0:
        q = q.limit(limit)
    rows = list(await session.exec(q))

    if limit > 0 and len(rows) >= limit:
        last = rows[-1]
        tail = await session.exec(
            select(NotificationMessage)
            .where(NotificationMessage.created == last.created)
            .where(NotificationMessage.id > last.id)
            .order_by(NotificationMessage.id)
        )
        rows.extend(tail)
    return rows
