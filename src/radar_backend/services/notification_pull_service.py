"""Notification pull dispatcher.

GET (path form) and POST (JSON body form) share one pipeline:

    validate -> existence check -> fetch -> 200

Each stage may short-circuit with a `PullError`; no later stage runs. Every
outcome is turned into a response here, and the deny list is recorded for
the rejections that count as abuse (unsupported method, failed validation,
already registered user).
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.responses import Response

from radar_backend.errors import (
    AlreadyRegistered,
    MalformedRequest,
    PullError,
    StoreError,
    StoreOverloadedError,
    UnsupportedMethod,
    UpstreamFailure,
    UpstreamOverload,
    ValidationFailed,
)
from radar_backend.schemas import NotificationMessage, PullRequestParameters, PullResult
from radar_backend.services.protocols import (
    DenyListRecorder,
    NotificationService,
    UserRepository,
    UserValidator,
)

logger = logging.getLogger(__name__)


def parse_path_parameters(
    user_uuid: str, user_major: str, user_minor: str, last_notification_time: str
) -> PullRequestParameters:
    try:
        return PullRequestParameters(
            user_uuid=user_uuid,
            user_major=user_major,
            user_minor=user_minor,
            last_notification_time=last_notification_time,  # pyright: ignore[reportArgumentType]
        )
    except ValidationError as exc:
        raise MalformedRequest(
            "invalid path parameters",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def parse_body_parameters(body: bytes) -> PullRequestParameters:
    try:
        return PullRequestParameters.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedRequest(
            "invalid request body",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


class NotificationPullHandler:
    def __init__(
        self,
        *,
        users: UserRepository,
        validator: UserValidator,
        notifications: NotificationService,
        deny_list: DenyListRecorder,
    ) -> None:
        self._users = users
        self._validator = validator
        self._notifications = notifications
        self._deny_list = deny_list

    async def pull_from_path(
        self,
        request: Request,
        *,
        user_uuid: str,
        user_major: str,
        user_minor: str,
        last_notification_time: str,
    ) -> Response:
        try:
            params = parse_path_parameters(
                user_uuid, user_major, user_minor, last_notification_time
            )
        except PullError as exc:
            return await self._reject(request, exc)
        return await self.pull(request, params)

    async def pull_from_body(self, request: Request) -> Response:
        try:
            params = parse_body_parameters(await request.body())
        except PullError as exc:
            return await self._reject(request, exc)
        return await self.pull(request, params)

    async def pull(self, request: Request, params: PullRequestParameters) -> Response:
        logger.info(
            "notification pull processed a request request_id=%s method=%s",
            getattr(request.state, "request_id", None),
            request.method,
        )
        try:
            result = await self._run(request, params)
        except PullError as exc:
            return await self._reject(request, exc)
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True))

    async def _run(self, request: Request, params: PullRequestParameters) -> PullResult:
        outcome = await self._validator.validate(request, params)
        if not outcome.is_valid:
            if outcome.error_response is None:
                raise ValidationFailed(Response(status_code=400))
            raise ValidationFailed(outcome.error_response)

        await self._ensure_not_registered(params.get_id())

        messages, watermark = await self._fetch(params.last_notification_time)
        return PullResult(messages=messages, last_notification_time=watermark)

    async def _ensure_not_registered(self, user_id: str) -> None:
        try:
            exists = await self._users.exists(user_id)
        except StoreOverloadedError as exc:
            raise UpstreamOverload(str(exc)) from exc
        except StoreError as exc:
            raise UpstreamFailure(str(exc)) from exc
        except Exception as exc:
            raise UpstreamFailure("user existence check failed") from exc
        if exists:
            raise AlreadyRegistered(user_id)

    async def _fetch(self, since: datetime) -> tuple[list[NotificationMessage], datetime]:
        try:
            return await self._notifications.get_notification_messages(since)
        except StoreOverloadedError as exc:
            raise UpstreamOverload(str(exc)) from exc
        except StoreError as exc:
            raise UpstreamFailure(str(exc)) from exc
        except Exception as exc:
            raise UpstreamFailure("notification fetch failed") from exc

    async def _reject(self, request: Request, exc: PullError) -> Response:
        return await reject(request, exc, self._deny_list)


async def reject(request: Request, exc: PullError, deny_list: DenyListRecorder) -> Response:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(exc, UpstreamFailure):
        logger.warning(
            "notification pull upstream failure request_id=%s", request_id, exc_info=exc
        )
    else:
        logger.info("notification pull rejected request_id=%s reason=%s", request_id, exc.reason)
    if exc.deny:
        await deny_list.record(request, exc.reason)
    return exc.to_response(request)


async def reject_unsupported(request: Request, deny_list: DenyListRecorder) -> Response:
    """Answer a method the pull endpoint does not serve; nothing else runs."""
    return await reject(request, UnsupportedMethod(request.method), deny_list)
