"""Bearer token verification for the identity provider (JWT, HS256 by default)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from jose.exceptions import JWTError

from app.core.config import get_settings

ACCESS_TOKEN_EXPIRE_MINUTES = 60


def create_access_token(
    sub: str,
    *,
    expires_minutes: int | None = None,
    extra: dict[str, Any] | None = None,
) -> str:
    """Issue a token for ``sub``. The identity provider owns issuance; used by tests and tooling."""
    s = get_settings()
    now = datetime.now(timezone.utc)
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    payload: dict[str, Any] = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, s.jwt_secret_key, algorithm=s.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiration. Raises JWTError (or ExpiredSignatureError) if invalid."""
    s = get_settings()
    payload = jwt.decode(
        token,
        s.jwt_secret_key,
        algorithms=[s.jwt_algorithm],
        options={"verify_signature": True, "verify_exp": True},
    )
    if "exp" not in payload:
        raise JWTError("Missing exp")
    return payload
