from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User


async def user_exists(session: AsyncSession, user_id: str) -> bool:
    result = await session.exec(select(User.id).where(User.id == user_id).limit(1))
    return result.first() is not None
