"""Outcomes of the notification pull pipeline.

Each `PullError` knows its HTTP rendering and whether the caller is recorded
on the deny list. The dispatcher resolves all of them; none leaves the
component as an exception.
"""

from __future__ import annotations

from fastapi import Request
from starlette.responses import PlainTextResponse, Response

from radar_backend.error_handlers import build_error_response


class StoreError(RuntimeError):
    """A backing store (user or message store) call failed."""


class StoreOverloadedError(StoreError):
    """The backing store signalled resource exhaustion; retryable by the caller."""


class PullError(Exception):
    reason: str = "pull_error"
    deny: bool = False

    def to_response(self, request: Request) -> Response:
        raise NotImplementedError


class UnsupportedMethod(PullError):
    reason = "unsupported_method"
    deny = True

    def to_response(self, request: Request) -> Response:
        return PlainTextResponse("Not Supported", status_code=400)


class ValidationFailed(PullError):
    reason = "validation_failed"
    deny = True

    def __init__(self, response: Response) -> None:
        super().__init__(f"validation failed status={response.status_code}")
        self.response = response

    def to_response(self, request: Request) -> Response:
        # Status and body belong to the validator.
        return self.response


class AlreadyRegistered(PullError):
    reason = "already_registered"
    deny = True

    def to_response(self, request: Request) -> Response:
        return Response(status_code=400)


class UpstreamOverload(PullError):
    reason = "upstream_overload"

    def to_response(self, request: Request) -> Response:
        return Response(status_code=503)


class UpstreamFailure(PullError):
    reason = "upstream_failure"

    def to_response(self, request: Request) -> Response:
        return build_error_response(request, status_code=502, message="upstream store failure")


class MalformedRequest(PullError):
    reason = "malformed_request"

    def __init__(self, message: str, details: object | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self, request: Request) -> Response:
        return build_error_response(
            request, status_code=400, message=self.message, details=self.details
        )
