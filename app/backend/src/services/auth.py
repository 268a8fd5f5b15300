"""Registration and login."""

from __future__ import annotations

import structlog
from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from app.backend.src.core.config import get_settings
from app.backend.src.core.errors import EmailAlreadyExists, InvalidCredentials
from app.backend.src.core.security import create_access_token, hash_password, verify_password
from app.backend.src.models import User
from app.backend.src.schemas.user import LoginRequest, RegisterRequest, TokenResponse

LOGGER = structlog.get_logger(__name__)


def register_user(session: Session, payload: RegisterRequest) -> User:
    """Create a user account; emails are unique."""

    LOGGER.info("register_attempt", email=payload.email)
    if session.execute(select(exists().where(User.email == payload.email))).scalar():
        LOGGER.warning("register_email_taken", email=payload.email)
        raise EmailAlreadyExists(payload.email)

    user = User(
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    LOGGER.info("user_registered", user_id=user.id, email=user.email, role=user.role)
    return user


def authenticate(session: Session, payload: LoginRequest) -> TokenResponse:
    """Verify credentials and issue an access token."""

    user = session.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
        LOGGER.warning("login_failed", email=payload.email)
        raise InvalidCredentials()

    settings = get_settings()
    token = create_access_token(user.email, user.role)
    LOGGER.info("login_succeeded", email=user.email)
    return TokenResponse(
        access_token=token,
        expires_in=settings.jwt_expiration_minutes * 60,
    )


__all__ = ["authenticate", "register_user"]
