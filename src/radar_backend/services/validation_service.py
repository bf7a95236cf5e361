"""Caller validation for notification pull requests.

Checks the shape of the parsed parameters, the client's watermark against the
server clock, and the per-user bearer token. Rejections carry the complete
response the dispatcher returns.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta

from fastapi import Request

from radar_backend.config import settings
from radar_backend.error_handlers import build_error_response
from radar_backend.models import utc_now
from radar_backend.schemas import PullRequestParameters
from radar_backend.security import extract_bearer_token, verify_user_token
from radar_backend.services.protocols import ValidationOutcome

logger = logging.getLogger(__name__)

_USER_UUID_RE = re.compile(r"^[A-Za-z0-9-]{1,64}$")
_BEACON_ID_MAX = 65535


def _is_beacon_id(value: str) -> bool:
    return value.isdigit() and int(value) <= _BEACON_ID_MAX


def parameter_errors(params: PullRequestParameters) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    if not _USER_UUID_RE.match(params.user_uuid):
        errors.append({"field": "userUuid", "reason": "must be 1-64 chars of [A-Za-z0-9-]"})
    if not _is_beacon_id(params.user_major):
        errors.append({"field": "userMajor", "reason": "must be an integer in 0..65535"})
    if not _is_beacon_id(params.user_minor):
        errors.append({"field": "userMinor", "reason": "must be an integer in 0..65535"})

    max_skew = timedelta(seconds=max(0, settings.pull_max_client_clock_skew_seconds))
    if params.last_notification_time > utc_now() + max_skew:
        errors.append({"field": "lastNotificationTime", "reason": "is in the future"})
    return errors


class ValidationUserService:
    async def validate(
        self, request: Request, params: PullRequestParameters
    ) -> ValidationOutcome:
        errors = parameter_errors(params)
        if errors:
            return ValidationOutcome(
                is_valid=False,
                error_response=build_error_response(
                    request, status_code=400, message="invalid parameters", details=errors
                ),
            )

        token = extract_bearer_token(request)
        if token is None:
            return ValidationOutcome(
                is_valid=False,
                error_response=build_error_response(
                    request, status_code=401, message="missing token"
                ),
            )
        if not verify_user_token(params.user_uuid, token):
            logger.info(
                "user token mismatch request_id=%s",
                getattr(request.state, "request_id", None),
            )
            return ValidationOutcome(
                is_valid=False,
                error_response=build_error_response(
                    request, status_code=401, message="invalid token"
                ),
            )
        return ValidationOutcome(is_valid=True)
