"""Authorization chain: ordered pass/fail gates run before a route handler.

Every gate has the same shape, ``(GateContext) -> Decision``. A chain is
composed once per route at import time and plugged into FastAPI as a
dependency::

    @router.get("/enrollments")
    async def list_enrollments(principal: Principal = Depends(require_admin)): ...

The first gate that denies ends the chain and its error becomes the
response. Gates after it never run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from fastapi import Request

from enrollgate.exceptions import EnrollGateError, ForbiddenError, TokenError, UnauthenticatedError
from enrollgate.rbac import ADMIN_ONLY, ANY_ROLE, STUDENT_ONLY, Principal, Role, authorize
from enrollgate.tokens import get_jwt_secret, verify_token

_audit_logger = logging.getLogger("enrollgate.audit")


@dataclass
class GateContext:
    """What the gates can see of a request, plus the principal once resolved."""

    method: str
    path: str
    headers: Mapping[str, str]
    client: str = "unknown"
    principal: Principal | None = None
    extras: dict = field(default_factory=dict)

    @classmethod
    def from_request(cls, request: Request) -> GateContext:
        return cls(
            method=request.method,
            path=request.url.path,
            headers=request.headers,
            client=request.client.host if request.client else "unknown",
        )


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: EnrollGateError | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: EnrollGateError) -> Decision:
        return cls(allowed=False, error=error)


Gate = Callable[[GateContext], Decision]


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, or ``None``."""
    auth_header = headers.get("Authorization") or headers.get("authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def authenticate(ctx: GateContext) -> Decision:
    """Gate 1: resolve the bearer token into a principal."""
    token = extract_bearer_token(ctx.headers)
    if token is None:
        ctx.extras["reason"] = "no_token"
        return Decision.deny(UnauthenticatedError())

    try:
        ctx.principal = verify_token(token, get_jwt_secret())
    except TokenError as e:
        ctx.extras["reason"] = e.error_type
        return Decision.deny(UnauthenticatedError(e.message))
    return Decision.allow()


def require_roles(roles: frozenset[Role]) -> Gate:
    """Gate 2 factory: the resolved principal must hold one of *roles*."""
    wanted = ", ".join(sorted(str(r) for r in roles))

    def _check(ctx: GateContext) -> Decision:
        if ctx.principal is None:
            ctx.extras["reason"] = "no_principal"
            return Decision.deny(ForbiddenError("Forbidden access"))
        if not authorize(ctx.principal, roles):
            ctx.extras["reason"] = "role_mismatch"
            return Decision.deny(ForbiddenError(f"Requires one of roles: {wanted}"))
        return Decision.allow()

    _check.__name__ = f"require_roles[{wanted}]"
    return _check


class AuthorizationChain:
    """An ordered, short-circuiting sequence of gates."""

    def __init__(self, name: str, gates: Sequence[Gate]) -> None:
        self.name = name
        self.gates: tuple[Gate, ...] = tuple(gates)

    def run(self, ctx: GateContext) -> Principal:
        """Run every gate in order; raise the first denial, return the principal."""
        for gate in self.gates:
            decision = gate(ctx)
            if not decision.allowed:
                error = decision.error or ForbiddenError()
                _audit_logger.warning(
                    "Auth failure (%s): %s %s from %s",
                    ctx.extras.get("reason", error.error_type),
                    ctx.method,
                    ctx.path,
                    ctx.client,
                    extra={
                        "event_category": "audit",
                        "action": "auth_failure",
                        "chain": self.name,
                        "gate": getattr(gate, "__name__", repr(gate)),
                        "reason": ctx.extras.get("reason", error.error_type),
                        "path": ctx.path,
                        "identity": ctx.principal.identity if ctx.principal else None,
                    },
                )
                raise error
        if ctx.principal is None:
            raise ForbiddenError()
        return ctx.principal

    def __repr__(self) -> str:
        return f"AuthorizationChain({self.name!r}, gates={len(self.gates)})"


def chain_dependency(chain: AuthorizationChain):
    """Dependency factory: run *chain* against the request and return the principal.

    The principal is also stored on ``request.state.principal``.
    """

    async def _resolve(request: Request) -> Principal:
        principal = chain.run(GateContext.from_request(request))
        request.state.principal = principal
        return principal

    _resolve.__name__ = f"require_{chain.name}"
    return _resolve


ADMIN_CHAIN = AuthorizationChain("admin", [authenticate, require_roles(ADMIN_ONLY)])
STUDENT_CHAIN = AuthorizationChain("student", [authenticate, require_roles(STUDENT_ONLY)])
ANY_ROLE_CHAIN = AuthorizationChain("any_role", [authenticate, require_roles(ANY_ROLE)])

require_admin = chain_dependency(ADMIN_CHAIN)
require_student = chain_dependency(STUDENT_CHAIN)
require_any_role = chain_dependency(ANY_ROLE_CHAIN)
