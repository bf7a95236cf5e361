from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from radar_backend.repositories import users_repo
from radar_backend.store_guard import call_store


class SqlUserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, user_id: str) -> bool:
        return await call_store(
            "users.exists", lambda: users_repo.user_exists(self._session, user_id)
        )
