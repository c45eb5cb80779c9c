"""Password hashing and admin session tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from backoffice.core.config import get_settings
from backoffice.shared.exceptions import UnauthenticatedException

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
settings = get_settings()

# Missing bearer tokens are rejected in get_current_actor.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_prefix}/auth/login",
    auto_error=False,
)


@dataclass(frozen=True)
class TokenClaims:
    """Validated claims of an admin token."""

    admin_id: UUID
    token_type: str
    role: str | None = None
    token_id: str | None = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def new_token_id() -> str:
    """Opaque id tying a refresh token to its stored admin session."""
    return uuid4().hex


def refresh_expires_at(issued_at: datetime | None = None) -> datetime:
    return (issued_at or datetime.now(UTC)) + timedelta(days=settings.refresh_token_expire_days)


def _encode(subject: str, token_type: str, expires_at: datetime, claims: dict[str, Any]) -> str:
    payload: dict[str, Any] = {"sub": subject, "type": token_type, "exp": expires_at}
    payload.update({key: value for key, value in claims.items() if value is not None})
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(subject: str, **claims: Any) -> str:
    """Short-lived bearer token carrying the admin's role."""
    expires_at = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(subject, ACCESS_TOKEN, expires_at, claims)


def create_refresh_token(subject: str, token_id: str, **claims: Any) -> str:
    """Long-lived token; only valid while its session row is unrevoked."""
    return _encode(subject, REFRESH_TOKEN, refresh_expires_at(), {**claims, "jti": token_id})


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry; return the raw payload."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise UnauthenticatedException("Invalid or expired token") from exc


def read_claims(token: str, expected_type: str) -> TokenClaims:
    """Decode a token and check it is of the expected type with a usable subject.

    Refresh tokens must also carry a ``jti`` naming their session.
    """
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise UnauthenticatedException(f"Invalid {expected_type} token")

    try:
        admin_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise UnauthenticatedException("Token subject is missing") from exc

    token_id = payload.get("jti")
    if expected_type == REFRESH_TOKEN and not token_id:
        raise UnauthenticatedException("Invalid refresh token")

    return TokenClaims(
        admin_id=admin_id,
        token_type=expected_type,
        role=payload.get("role"),
        token_id=str(token_id) if token_id else None,
    )
