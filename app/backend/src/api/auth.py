"""Registration, login and profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.backend.src.core.security import get_current_user
from app.backend.src.db import get_session_dependency
from app.backend.src.models import User
from app.backend.src.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserRead
from app.backend.src.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> User:
    """Create a purchasing or finance specialist account."""

    return auth_service.register_user(session, payload)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> TokenResponse:
    """Exchange credentials for a bearer token."""

    return auth_service.authenticate(session, payload)


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Return the authenticated user's profile."""

    return current_user
