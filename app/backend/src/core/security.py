"""Security helpers: password hashing, JWT issuance and caller resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.core.config import get_settings
from app.backend.src.db import get_session_dependency
from app.backend.src.models import User, UserRole

LOGGER = structlog.get_logger(__name__)

_scheme = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class CallerIdentity:
    """Identity of the authenticated caller, threaded through core operations."""

    email: str
    first_name: str
    last_name: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "CallerIdentity":
        return cls(
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=UserRole(user.role),
        )


# -------------------------------------------------------
# Passwords + Tokens
# -------------------------------------------------------

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context.verify(plain_password, hashed_password)


def create_access_token(email: str, role: str, *, expires_minutes: int | None = None) -> str:
    """Return a signed access token carrying the user's email and role."""

    settings = get_settings()
    lifetime = expires_minutes if expires_minutes is not None else settings.jwt_expiration_minutes
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=lifetime),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token."""

    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
        ) from exc
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc


# -------------------------------------------------------
# Current User + Role Enforcement
# -------------------------------------------------------

def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_scheme),
    session: Session = Depends(get_session_dependency),
) -> User:
    """Resolve the authenticated user from the bearer token."""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
        )

    payload = _decode_token(credentials.credentials)
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject",
        )

    user = session.execute(select(User).where(User.email == subject)).scalar_one_or_none()
    if user is None:
        LOGGER.warning("token_subject_unknown", email=subject)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User record not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    return user


def get_caller_identity(user: User = Depends(get_current_user)) -> CallerIdentity:
    """Dependency returning the caller as a :class:`CallerIdentity`."""

    return CallerIdentity.from_user(user)


def _enforce_roles(caller: CallerIdentity, allowed_roles: set[UserRole]) -> CallerIdentity:
    """Ensure the caller has one of the allowed roles."""

    if caller.role in allowed_roles:
        return caller
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )


def require_role(roles: Iterable[UserRole]):
    """Return a dependency that enforces one of the provided roles."""

    allowed = set(roles)

    def dependency(caller: CallerIdentity = Depends(get_caller_identity)) -> CallerIdentity:
        return _enforce_roles(caller, allowed)

    return dependency


require_purchasing_specialist = require_role([UserRole.PURCHASING_SPECIALIST])
require_finance_specialist = require_role([UserRole.FINANCE_SPECIALIST])


__all__ = [
    "CallerIdentity",
    "create_access_token",
    "get_caller_identity",
    "get_current_user",
    "hash_password",
    "require_finance_specialist",
    "require_purchasing_specialist",
    "require_role",
    "verify_password",
]
