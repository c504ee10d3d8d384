"""Custom exception hierarchy for enrollgate.

Provides structured error types that the centralized exception handlers
translate into the JSON response envelope.
"""

from __future__ import annotations


class EnrollGateError(Exception):
    """Base exception for all enrollgate errors. Unclassified failures map to 500."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "Something is wrong, please try again") -> None:
        self.message = message
        super().__init__(message)


class TokenError(EnrollGateError):
    """Credential could not be turned into a principal."""

    status_code = 401
    error_type = "invalid_token"


class MalformedTokenError(TokenError):
    """Token is structurally broken, misses claims, or names an unknown role."""

    error_type = "malformed_token"

    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message)


class InvalidSignatureError(TokenError):
    """Token signature does not match the server secret."""

    error_type = "invalid_signature"

    def __init__(self, message: str = "Invalid token signature") -> None:
        super().__init__(message)


class TokenExpiredError(TokenError):
    """Token is past its ``exp`` claim."""

    error_type = "token_expired"

    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)


class UnauthenticatedError(EnrollGateError):
    """No usable credential was presented."""

    status_code = 401
    error_type = "unauthenticated"

    def __init__(self, message: str = "Authorization header is missing or invalid") -> None:
        super().__init__(message)


class ForbiddenError(EnrollGateError):
    """Role or ownership policy denied the request."""

    status_code = 403
    error_type = "forbidden"

    def __init__(self, message: str = "Forbidden access") -> None:
        super().__init__(message)


class ValidationFailedError(EnrollGateError):
    """Request body failed schema validation."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)


class NotFoundError(EnrollGateError):
    """Requested resource was not found."""

    status_code = 404
    error_type = "not_found"


class ConflictError(EnrollGateError):
    """Write would violate a uniqueness invariant."""

    status_code = 409
    error_type = "conflict"


class NotImplementedFeatureError(EnrollGateError):
    """Endpoint exists but has no behaviour behind it."""

    status_code = 501
    error_type = "not_implemented"
