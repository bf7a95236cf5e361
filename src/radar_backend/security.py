from __future__ import annotations

import hashlib
import hmac

from fastapi import Request

from radar_backend.config import settings


def _hmac_sha256_hex(secret: str, message: str) -> str:
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_user_token(user_uuid: str, *, secret: str | None = None) -> str:
    """Bearer token a device presents for `user_uuid`."""
    key = settings.user_token_secret if secret is None else secret
    return _hmac_sha256_hex(key, user_uuid)


def verify_user_token(user_uuid: str, token: str) -> bool:
    expected = issue_user_token(user_uuid).encode("utf-8")
    return hmac.compare_digest(expected, token.strip().encode("utf-8"))


def extract_bearer_token(request: Request) -> str | None:
    raw = request.headers.get("authorization")
    if not raw:
        return None
    scheme, _, value = raw.strip().partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def verify_function_key(provided: str | None) -> bool:
    expected = settings.function_key.strip()
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.strip().encode("utf-8"))
