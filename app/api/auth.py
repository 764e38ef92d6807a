"""
Auth router — registration, user login and admin login.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.security import TokenService, get_token_service
from app.database import get_db
from app.models.users import ROLE_USER
from app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Request / Response schemas ────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    login: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    role: Literal["USER", "ADMIN"] = ROLE_USER


class LoginRequest(BaseModel):
    login: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_200_OK, response_class=Response)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create a USER account. Does not log the new account in."""
    auth_service.register(db, body.login, body.password, body.role)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Authenticate with login + password.
    Returns a signed token valid for two hours.
    """
    issued = auth_service.login(db, token_service, body.login, body.password)
    return LoginResponse(token=issued.token, expires_at=issued.expires_at)


@router.post("/admin", response_model=LoginResponse)
def admin_login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    """Login restricted to the reserved admin login."""
    issued = auth_service.admin_login(db, token_service, body.login, body.password)
    return LoginResponse(token=issued.token, expires_at=issued.expires_at)
