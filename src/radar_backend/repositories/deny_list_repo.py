from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import DenyListEntry


def add_entry(session: AsyncSession, entry: DenyListEntry) -> None:
    session.add(entry)


async def delete_expired(session: AsyncSession, now: datetime) -> None:
    table = SQLModel.metadata.tables["deny_list_entries"]
    await session.exec(sa.delete(table).where(table.c.expires_at <= now))
