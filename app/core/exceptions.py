"""
ProductsCatalog — Custom Exceptions.
Each exception carries: message, error_code, http_status_code, optional detail dict.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

# ─────────────────────────────────────────────────────────────────────────────
# BASE
# ─────────────────────────────────────────────────────────────────────────────


class CatalogError(Exception):
    """Root exception for all ProductsCatalog errors."""

    http_status_code: int = 400
    error_code: str = "CATALOG_ERROR"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "detail": self.detail,
        }


# ─────────────────────────────────────────────────────────────────────────────
# REQUEST CONTENT
# ─────────────────────────────────────────────────────────────────────────────


class InvalidInputError(CatalogError):
    """Malformed or forbidden request content, e.g. self-registering as admin."""

    http_status_code = 400
    error_code = "INVALID_INPUT"


class ConflictError(CatalogError):
    """A unique key (login, product name) is already taken."""

    http_status_code = 400
    error_code = "CONFLICT"

    def __init__(self, resource: str, field: str, value: str) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(
            message=f"{resource} with {field}={value!r} already exists",
            detail={"resource": resource, "field": field},
        )


class NotFoundError(CatalogError):
    http_status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} {identifier!r} not found",
            detail={"resource": resource},
        )


# ─────────────────────────────────────────────────────────────────────────────
# AUTHENTICATION / AUTHORIZATION
# ─────────────────────────────────────────────────────────────────────────────


class InvalidCredentialsError(CatalogError):
    """
    Login or password mismatch. The message is identical for an unknown
    login and a wrong password.
    """

    http_status_code = 401
    error_code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__(message="Invalid login or password.")


class UnauthenticatedError(CatalogError):
    http_status_code = 401
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Not authenticated.") -> None:
        super().__init__(message=message)


class ForbiddenError(CatalogError):
    http_status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, role: str, required_role: str) -> None:
        self.role = role
        self.required_role = required_role
        super().__init__(
            message=f"Role '{role}' may not access this operation (requires '{required_role}')",
            detail={"role": role, "required_role": required_role},
        )


# ─── Token validation ─────────────────────────────────────────────────────────


class TokenError(CatalogError):
    """Base for session-token validation failures. Always terminal."""

    http_status_code = 401
    error_code = "INVALID_TOKEN"


class MalformedTokenError(TokenError):
    error_code = "MALFORMED_TOKEN"

    def __init__(self, reason: str = "structurally invalid") -> None:
        self.reason = reason
        super().__init__(message=f"Malformed token: {reason}")


class BadSignatureError(TokenError):
    error_code = "BAD_SIGNATURE"

    def __init__(self) -> None:
        super().__init__(message="Token signature verification failed.")


class TokenExpiredError(TokenError):
    error_code = "TOKEN_EXPIRED"

    def __init__(self) -> None:
        super().__init__(message="Token has expired.")
