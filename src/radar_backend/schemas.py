from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from radar_backend.models import ensure_utc


class ErrorResponse(BaseModel):
    """Error envelope shared by every non-empty error response.

    `{error, message, request_id, details}`; `request_id` echoes X-Request-Id.
    """

    error: str
    message: str
    request_id: str | None = None
    details: object | None = None


class HealthResponse(BaseModel):
    ok: bool = True


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PullRequestParameters(_CamelModel):
    user_uuid: str
    user_major: str
    user_minor: str
    last_notification_time: datetime

    @field_validator("user_major", "user_minor", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: object) -> object:
        # Some clients send beacon major/minor as JSON numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("last_notification_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        try:
            return ensure_utc(value)
        except OverflowError as exc:
            # Offsets at the datetime bounds cannot be shifted to UTC.
            raise ValueError("timestamp out of range") from exc

    def get_id(self) -> str:
        return self.user_uuid


class NotificationMessage(_CamelModel):
    id: str
    title: str
    message: str
    created: datetime


class PullResult(_CamelModel):
    messages: list[NotificationMessage] = Field(default_factory=list)
    last_notification_time: datetime
