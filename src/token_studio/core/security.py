"""Access-token helpers for wallet-authenticated callers.

Tokens are minted by the upstream wallet login flow; this service only needs
to read them back. `create_access_token` exists for tooling and tests.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import jwt

from token_studio.core.settings import settings


def create_access_token(address: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT whose subject is the caller's wallet address."""
    to_encode: dict[str, object] = {"sub": address}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, object]:
    """Decode and verify a JWT, raising `jose.JWTError` on failure."""
    payload: dict[str, object] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload
