"""
ProductsCatalog — Security Layer
Password hashing, signed session tokens (JWT), and the request Identity.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from jose import jws, jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode
from passlib.context import CryptContext

from app.config import get_settings
from app.core.exceptions import (
    BadSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from app.models.users import ROLE_ADMIN, ROLES

# ─── Password hashing ─────────────────────────────────────────────────────────
# pbkdf2_sha256 hashes embed algorithm, rounds and salt: "$pbkdf2-sha256$29000$<salt>$<digest>"
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a salted one-way hash of the given plain-text password."""
    if not password:
        raise ValueError("password must not be blank")
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Return True if the plain password matches the hash.
    Fails closed: an empty input or an unrecognised/corrupt hash returns False.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return _pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


# ─── Identity ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as attached to a request by the gate."""

    user_id: str
    login: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ─── JWT ──────────────────────────────────────────────────────────────────────


class TokenService:
    """
    Issues and validates stateless session tokens.

    A token carries sub (account id), login, role, iat and exp. Validation
    checks, in order: structure, signature, claims, expiry. Claims of a token
    whose signature does not verify are never returned.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=2),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be blank")
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    def issue(self, user_id: str, login: str, role: str) -> IssuedToken:
        # JWT timestamps are whole seconds
        now = self._clock().replace(microsecond=0)
        expires_at = now + self._lifetime

        payload: Dict[str, Any] = {
            "sub": user_id,
            "login": login,
            "role": role,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> Identity:
        """
        Return the Identity encoded in the token.

        Raises MalformedTokenError, BadSignatureError or TokenExpiredError.
        """
        self._check_structure(token)

        try:
            raw_claims = jws.verify(token, self._secret, algorithms=[self._algorithm])
        except JOSEError as exc:
            raise BadSignatureError() from exc

        claims = self._parse_claims(raw_claims)

        if self._clock().timestamp() >= claims["exp"]:
            raise TokenExpiredError()

        return Identity(
            user_id=claims["sub"], login=claims["login"], role=claims["role"]
        )

    @staticmethod
    def _check_structure(token: str) -> None:
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("empty token")

        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedTokenError("expected three segments")

        try:
            for segment in segments:
                base64url_decode(segment.encode("ascii"))
            header = jwt.get_unverified_header(token)
        except (ValueError, UnicodeEncodeError, JOSEError) as exc:
            raise MalformedTokenError("undecodable segment") from exc

        if not isinstance(header, dict) or "alg" not in header:
            raise MalformedTokenError("missing header")

    @staticmethod
    def _parse_claims(raw_claims: bytes) -> Dict[str, Any]:
        try:
            claims = json.loads(raw_claims)
        except ValueError as exc:
            raise MalformedTokenError("payload is not JSON") from exc

        if not isinstance(claims, dict):
            raise MalformedTokenError("payload is not an object")
        for name in ("sub", "login", "role"):
            if not isinstance(claims.get(name), str) or not claims[name]:
                raise MalformedTokenError(f"missing '{name}' claim")
        if claims["role"] not in ROLES:
            raise MalformedTokenError("unknown role")
        if not isinstance(claims.get("exp"), (int, float)):
            raise MalformedTokenError("missing 'exp' claim")
        return claims


@lru_cache()
def get_token_service() -> TokenService:
    """Process-wide TokenService built once from settings."""
    settings = get_settings()
    return TokenService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=timedelta(minutes=settings.JWT_EXPIRY_MINUTES),
    )


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()
