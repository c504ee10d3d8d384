"""Role and ownership policies for enrollgate.

Two roles exist:
    ADMIN   : sees and resets every collection, bypasses ownership checks
    STUDENT : reads and writes only the enrollments under its own student id

Both decisions are pure functions of the principal and the request target;
``ensure_can_access`` also writes denials to the audit log. The gates in
``chain.py`` and the route handlers call into them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from enrollgate.exceptions import ForbiddenError

_audit_logger = logging.getLogger("enrollgate.audit")


class Role(StrEnum):
    """Enumerated platform roles."""

    ADMIN = "ADMIN"
    STUDENT = "STUDENT"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller for a single request."""

    identity: str
    role: Role
    owned_id: str | None = None


ADMIN_ONLY: frozenset[Role] = frozenset({Role.ADMIN})
STUDENT_ONLY: frozenset[Role] = frozenset({Role.STUDENT})
ANY_ROLE: frozenset[Role] = frozenset(Role)


def authorize(principal: Principal | None, required_roles: frozenset[Role]) -> bool:
    """Return ``True`` iff *principal* holds one of *required_roles*."""
    if principal is None:
        return False
    return principal.role in required_roles


def can_access(principal: Principal | None, target_owned_id: str) -> bool:
    """Decide whether *principal* may act on the record owned by *target_owned_id*.

    Administrators always pass. Students pass only on an exact string match
    with their own id.
    """
    if principal is None:
        return False
    if principal.role == Role.ADMIN:
        return True
    if principal.role == Role.STUDENT:
        return principal.owned_id is not None and principal.owned_id == target_owned_id
    return False


def ensure_can_access(
    principal: Principal | None,
    target_owned_id: str,
    message: str = "Forbidden access",
) -> None:
    """Raise :class:`ForbiddenError` unless :func:`can_access` allows the request."""
    if can_access(principal, target_owned_id):
        return
    _audit_logger.warning(
        "Ownership denied: %s -> %s",
        principal.identity if principal else "anonymous",
        target_owned_id,
        extra={
            "event_category": "audit",
            "action": "ownership_denied",
            "identity": principal.identity if principal else None,
            "role": str(principal.role) if principal else None,
            "reason": "owner_mismatch",
        },
    )
    raise ForbiddenError(message)
