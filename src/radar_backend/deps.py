from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from radar_backend.config import settings
from radar_backend.db import get_session
from radar_backend.security import verify_function_key
from radar_backend.services.deny_list_service import SqlDenyListRecorder
from radar_backend.services.notification_pull_service import NotificationPullHandler
from radar_backend.services.notification_service import SqlNotificationService
from radar_backend.services.protocols import (
    DenyListRecorder,
    NotificationService,
    UserRepository,
    UserValidator,
)
from radar_backend.services.users_service import SqlUserRepository
from radar_backend.services.validation_service import ValidationUserService

_FUNCTION_KEY_HEADER = "x-functions-key"
_FUNCTION_KEY_QUERY = "code"


async def require_function_key(request: Request) -> None:
    provided = request.headers.get(_FUNCTION_KEY_HEADER) or request.query_params.get(
        _FUNCTION_KEY_QUERY
    )
    if verify_function_key(provided):
        return
    if provided:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid function key")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing function key")


def get_user_repository(session: AsyncSession = Depends(get_session)) -> UserRepository:
    return SqlUserRepository(session)


def get_user_validator() -> UserValidator:
    return ValidationUserService()


def get_notification_service(
    session: AsyncSession = Depends(get_session),
) -> NotificationService:
    return SqlNotificationService(session, limit=settings.pull_message_limit)


def get_deny_list_recorder() -> DenyListRecorder:
    return SqlDenyListRecorder()


def resolve_deny_list_recorder(request: Request) -> DenyListRecorder:
    """Recorder for routes served outside dependency injection.

    Honors `app.dependency_overrides` the same way `Depends` would.
    """
    overrides = getattr(request.app, "dependency_overrides", {})
    factory = overrides.get(get_deny_list_recorder, get_deny_list_recorder)
    return factory()


def get_pull_handler(
    users: UserRepository = Depends(get_user_repository),
    validator: UserValidator = Depends(get_user_validator),
    notifications: NotificationService = Depends(get_notification_service),
    deny_list: DenyListRecorder = Depends(get_deny_list_recorder),
) -> NotificationPullHandler:
    return NotificationPullHandler(
        users=users,
        validator=validator,
        notifications=notifications,
        deny_list=deny_list,
    )
