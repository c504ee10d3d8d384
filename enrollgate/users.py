"""User accounts: login and listing."""

from __future__ import annotations

import hmac
import logging

from enrollgate.exceptions import UnauthenticatedError
from enrollgate.storage.base import Store
from enrollgate.tokens import get_jwt_secret, get_token_ttl, issue_token

logger = logging.getLogger("enrollgate.users")
_audit_logger = logging.getLogger("enrollgate.audit")


async def login_user(store: Store, username: str, password: str) -> dict:
    """Check *username*/*password* against the store and issue an access token.

    Returns dict with username, role, studentId, token.
    Raises UnauthenticatedError if the pair does not match a user.
    """
    user = await store.get_user(username)
    if user is None or not hmac.compare_digest(user.password.encode(), password.encode()):
        _audit_logger.warning(
            "Login failed for %s",
            username,
            extra={"event_category": "audit", "action": "login_failure", "identity": username},
        )
        raise UnauthenticatedError("Invalid username or password")

    token = issue_token(user.to_principal(), get_jwt_secret(), get_token_ttl())
    logger.info("Login succeeded for %s", user.username, extra={"identity": user.username})
    return {
        "username": user.username,
        "role": str(user.role),
        "studentId": user.student_id,
        "token": token,
    }


async def list_users(store: Store, *, redact_passwords: bool = True) -> list[dict]:
    return [u.to_public(redact_password=redact_passwords) for u in await store.list_users()]
