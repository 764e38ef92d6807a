"""
ProductsCatalog — Authorization Gate
Every request passes through the gate exactly once, before routing. The gate
looks up the route's policy, validates the bearer token when the policy needs
one, and attaches the caller's Identity to request.state.
"""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.exceptions import (
    CatalogError,
    ForbiddenError,
    TokenError,
    UnauthenticatedError,
)
from app.core.logging import logger
from app.core.security import Identity, TokenService, bearer_token, get_token_service
from app.models.users import ROLE_ADMIN


class Policy(str, enum.Enum):
    PUBLIC = "PUBLIC"
    AUTHENTICATED = "AUTHENTICATED"
    ADMIN = "ADMIN"


# ─── Route → policy table ─────────────────────────────────────────────────────

ROUTE_POLICIES: Mapping[Tuple[str, str], Policy] = MappingProxyType(
    {
        ("POST", "/auth/register"): Policy.PUBLIC,
        ("POST", "/auth/login"): Policy.PUBLIC,
        ("POST", "/auth/admin"): Policy.PUBLIC,
        ("GET", "/product"): Policy.PUBLIC,
        ("POST", "/product/chart/add"): Policy.PUBLIC,
        ("POST", "/product/add"): Policy.ADMIN,
        ("GET", "/product/clients"): Policy.ADMIN,
        ("GET", "/health"): Policy.PUBLIC,
    }
)

# API documentation
PUBLIC_PREFIXES: Tuple[str, ...] = ("/docs", "/redoc", "/openapi.json")

DEFAULT_POLICY = Policy.AUTHENTICATED


def _normalize_path(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


def resolve_policy(method: str, path: str) -> Policy:
    """Return the access policy for a request; unlisted routes need a token."""
    method = method.upper()
    if method == "OPTIONS":
        return Policy.PUBLIC
    if method == "HEAD":
        method = "GET"

    path = _normalize_path(path)
    policy = ROUTE_POLICIES.get((method, path))
    if policy is not None:
        return policy
    if any(path == p or path.startswith(p + "/") for p in PUBLIC_PREFIXES):
        return Policy.PUBLIC
    return DEFAULT_POLICY


def authorize(
    policy: Policy,
    authorization: Optional[str],
    token_service: TokenService,
) -> Optional[Identity]:
    """
    Apply a policy to the request's Authorization header value.

    Returns None for public routes (no token is inspected), otherwise the
    validated Identity. Raises UnauthenticatedError or ForbiddenError.
    """
    if policy is Policy.PUBLIC:
        return None

    token = bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError("Missing bearer token.")

    try:
        identity = token_service.validate(token)
    except TokenError as exc:
        raise UnauthenticatedError("Invalid or expired token.") from exc

    if policy is Policy.ADMIN and identity.role != ROLE_ADMIN:
        raise ForbiddenError(identity.role, ROLE_ADMIN)

    return identity


def _error_response(exc: CatalogError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status_code == 401 else None
    return JSONResponse(
        status_code=exc.http_status_code, content=exc.to_dict(), headers=headers
    )


class AuthorizationGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, token_service: Optional[TokenService] = None) -> None:
        super().__init__(app)
        self._token_service = token_service

    async def dispatch(self, request: Request, call_next) -> Response:
        policy = resolve_policy(request.method, request.url.path)
        token_service = self._token_service or get_token_service()

        try:
            identity = authorize(
                policy, request.headers.get("Authorization"), token_service
            )
        except CatalogError as exc:
            logger.warning(
                f"Gate denied {request.method} {request.url.path}: {exc.error_code}"
            )
            return _error_response(exc)

        request.state.identity = identity
        return await call_next(request)


# ─── FastAPI dependencies ─────────────────────────────────────────────────────


def get_current_identity(request: Request) -> Identity:
    """Identity attached by the gate; raises if the route ran without one."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthenticatedError()
    return identity


def require_admin(request: Request) -> Identity:
    identity = get_current_identity(request)
    if not identity.is_admin:
        raise ForbiddenError(identity.role, ROLE_ADMIN)
    return identity
