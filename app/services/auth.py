"""
Authentication service — registration, user login and admin login.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
)
from app.core.logging import logger
from app.core.security import IssuedToken, TokenService, hash_password, verify_password
from app.models.users import ROLE_ADMIN, ROLE_USER, ROLES, User


def normalize_login(login: str) -> str:
    return login.strip()


def get_user_by_login(db: Session, login: str) -> Optional[User]:
    return db.query(User).filter(User.login == login).first()


def create_user(db: Session, login: str, password: str, role: str = ROLE_USER) -> User:
    """
    Persist a new account. No policy checks: callers decide which roles are
    allowed. Raises ConflictError if the login is already taken.
    """
    if role not in ROLES:
        raise InvalidInputError(f"Unknown role {role!r}", detail={"role": role})

    login = normalize_login(login)
    if not login:
        raise InvalidInputError("Login must not be blank")

    # Hash before anything touches the session
    user = User(login=login, hashed_password=hash_password(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User", "login", login) from exc
    db.refresh(user)
    return user


def register(db: Session, login: str, password: str, role: str = ROLE_USER) -> User:
    """Self-service registration. ADMIN accounts are provisioned out of band."""
    if get_user_by_login(db, normalize_login(login)) is not None:
        logger.info(f"Registration rejected: login {login!r} already exists")
        raise ConflictError("User", "login", login)

    if role == ROLE_ADMIN:
        logger.warning(f"Registration rejected: {login!r} requested role ADMIN")
        raise InvalidInputError(
            "Self-registration as ADMIN is not allowed", detail={"role": role}
        )

    user = create_user(db, login, password, role)
    logger.info(f"Registered user {user.login!r} with role {user.role}")
    return user


def authenticate(db: Session, login: str, password: str) -> User:
    # Never log the submitted login on failure
    user = get_user_by_login(db, normalize_login(login))
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()
    return user


def login(
    db: Session, token_service: TokenService, login: str, password: str
) -> IssuedToken:
    user = authenticate(db, login, password)
    issued = token_service.issue(user.id, user.login, user.role)
    logger.info(f"User {user.login!r} logged in")
    return issued


def admin_login(
    db: Session, token_service: TokenService, login: str, password: str
) -> IssuedToken:
    """
    Same as login(), but only the reserved admin login may use it. The
    reserved login is checked before any account lookup.
    """
    if login != get_settings().ADMIN_LOGIN:
        logger.warning("Admin login rejected for a non-reserved login")
        raise InvalidInputError("This login may not use the admin endpoint")

    user = authenticate(db, login, password)
    issued = token_service.issue(user.id, user.login, user.role)
    logger.info(f"Admin {user.login!r} logged in")
    return issued
