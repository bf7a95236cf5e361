"""Collaborator contracts consumed by the notification pull dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from fastapi import Request
from starlette.responses import Response

from radar_backend.schemas import NotificationMessage, PullRequestParameters


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    error_response: Response | None = None


class UserRepository(Protocol):
    async def exists(self, user_id: str) -> bool:
        """Raise StoreOverloadedError on overload, StoreError on any other failure."""
        ...


class UserValidator(Protocol):
    async def validate(
        self, request: Request, params: PullRequestParameters
    ) -> ValidationOutcome: ...


class NotificationService(Protocol):
    async def get_notification_messages(
        self, since: datetime
    ) -> tuple[list[NotificationMessage], datetime]: ...


class DenyListRecorder(Protocol):
    async def record(self, request: Request, reason: str) -> None:
        """Best-effort; must not raise."""
        ...
