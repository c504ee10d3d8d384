"""Signed, short-lived access tokens (HS256 JWT).

Claims carried by every token:

- ``username`` : the caller's identity
- ``studentId``: the student id the caller owns, ``null`` for admins
- ``role``     : one of :class:`~enrollgate.rbac.Role`
- ``iat`` / ``exp``: issue time and absolute expiry (epoch seconds)
"""

from __future__ import annotations

import logging
import os
import time

import jwt

from enrollgate.config import DEV_JWT_SECRET, settings
from enrollgate.exceptions import InvalidSignatureError, MalformedTokenError, TokenExpiredError
from enrollgate.rbac import Principal, Role

logger = logging.getLogger("enrollgate.tokens")

_JWT_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["username", "role", "iat", "exp"]


def get_jwt_secret() -> str:
    # The dev-default warning is logged once at startup by log_startup_info.
    return os.environ.get("EG_JWT_SECRET", settings.jwt_secret) or DEV_JWT_SECRET


def get_token_ttl() -> int:
    """Token lifetime in seconds, re-read from EG_TOKEN_TTL_SECONDS.

    Values that are not positive integers are ignored with a warning and the
    configured ``settings.token_ttl_seconds`` is used instead.
    """
    raw = os.environ.get("EG_TOKEN_TTL_SECONDS")
    if raw is None:
        return settings.token_ttl_seconds
    try:
        ttl = int(raw)
    except ValueError:
        ttl = 0
    if ttl < 1:
        logger.warning(
            "Ignoring invalid EG_TOKEN_TTL_SECONDS=%r, using %ds",
            raw,
            settings.token_ttl_seconds,
        )
        return settings.token_ttl_seconds
    return ttl


def issue_token(
    principal: Principal,
    secret: str,
    ttl_seconds: int,
    *,
    now: float | None = None,
) -> str:
    """Sign a token for *principal* that expires *ttl_seconds* after *now*."""
    issued_at = int(time.time() if now is None else now)
    payload = {
        "username": principal.identity,
        "studentId": principal.owned_id,
        "role": str(principal.role),
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALGORITHM)


def verify_token(token: str, secret: str) -> Principal:
    """Verify *token* and return the principal it asserts.

    Signature is checked before expiry, so a forged expired token reports
    a bad signature rather than expiry.

    Raises:
        InvalidSignatureError: signature mismatch.
        TokenExpiredError: ``exp`` is in the past.
        MalformedTokenError: undecodable token, missing claims or unknown role.
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALGORITHM],
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError() from e
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError() from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError(f"Malformed token: {e}") from e

    return _principal_from_claims(claims)


def _principal_from_claims(claims: dict) -> Principal:
    identity = claims.get("username")
    if not isinstance(identity, str) or not identity:
        raise MalformedTokenError("Malformed token: username claim must be a non-empty string")

    try:
        role = Role(claims.get("role"))
    except ValueError as e:
        raise MalformedTokenError(f"Malformed token: unknown role {claims.get('role')!r}") from e

    owned_id = claims.get("studentId")
    if owned_id is not None and not isinstance(owned_id, str):
        raise MalformedTokenError("Malformed token: studentId claim must be a string")

    return Principal(identity=identity, role=role, owned_id=owned_id)
