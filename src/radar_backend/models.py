# basedpyright: reportAssignmentType=false
# basedpyright: reportIncompatibleVariableOverride=false

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC.

    SQLite drops tzinfo on the way in and out, so every datetime crossing the
    store boundary goes through here.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    __tablename__ = "users"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    # The user uuid issued to the device; also the existence-check key.
    id: str = Field(primary_key=True, min_length=1, max_length=64)
    user_major: str = Field(min_length=1, max_length=8)
    user_minor: str = Field(min_length=1, max_length=8)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False, index=True),
    )


class NotificationMessage(SQLModel, table=True):
    __tablename__ = "notification_messages"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: str = Field(default_factory=_new_id, primary_key=True, min_length=1, max_length=36)
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(sa_column=Column(Text, nullable=False))
    # Publication time; the pull watermark is compared against this column.
    created: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False, index=True),
    )


class DenyListEntry(SQLModel, table=True):
    __tablename__ = "deny_list_entries"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: Optional[int] = Field(default=None, primary_key=True)
    # e.g. ip:1.2.3.4
    key: str = Field(index=True, min_length=1, max_length=128)
    reason: str = Field(max_length=50)
    method: str = Field(max_length=16)
    path: str = Field(sa_column=Column(Text, nullable=False))
    client_ip: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False, index=True),
    )
    expires_at: datetime = Field(
        sa_column=Column(sa.DateTime(timezone=True), nullable=False, index=True),
    )
