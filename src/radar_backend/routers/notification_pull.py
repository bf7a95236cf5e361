"""Notification pull routes.

GET carries the parameters in the path, POST in a JSON body. Every other
method on either path, including verbs outside the standard HTTP set, answers
400 "Not Supported" and is recorded on the deny list.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from radar_backend.deps import get_pull_handler, require_function_key, resolve_deny_list_recorder
from radar_backend.services.notification_pull_service import (
    NotificationPullHandler,
    reject_unsupported,
)

router = APIRouter(tags=["notifications"], dependencies=[Depends(require_function_key)])

PULL_PATH = "/Notification/Pull"
PULL_PATH_WITH_PARAMS = (
    PULL_PATH + "/{user_uuid}/{user_major}/{user_minor}/{last_notification_time}"
)


@router.get(PULL_PATH_WITH_PARAMS)
async def pull_notifications_get(
    request: Request,
    user_uuid: str,
    user_major: str,
    user_minor: str,
    last_notification_time: str,
    handler: NotificationPullHandler = Depends(get_pull_handler),
) -> Response:
    return await handler.pull_from_path(
        request,
        user_uuid=user_uuid,
        user_major=user_major,
        user_minor=user_minor,
        last_notification_time=last_notification_time,
    )


@router.post(PULL_PATH)
async def pull_notifications_post(
    request: Request,
    handler: NotificationPullHandler = Depends(get_pull_handler),
) -> Response:
    return await handler.pull_from_body(request)


async def pull_notifications_not_supported(request: Request) -> Response:
    # Plain route: router dependencies do not apply, so the key is checked here.
    await require_function_key(request)
    return await reject_unsupported(request, resolve_deny_list_recorder(request))


# Registered after GET/POST without a method filter: the router falls through
# to these for any verb the routes above do not serve.
router.add_route(PULL_PATH_WITH_PARAMS, pull_notifications_not_supported, include_in_schema=False)
router.add_route(PULL_PATH, pull_notifications_not_supported, include_in_schema=False)
