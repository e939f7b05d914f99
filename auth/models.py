"""Auth domain records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    id: str
    login: str
    password_hash: bytes
    kdf_salt: bytes
    created_at: datetime = field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login={self.login})>"


@dataclass(frozen=True)
class RefreshToken:
    """Persisted refresh token. Only the digest of the raw secret is kept."""

    id: str
    user_id: str
    token_hash: bytes
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id})>"


@dataclass(frozen=True)
class AuthResult:
    user_id: str
    access_token: str
    refresh_token: str
    kdf_salt: bytes
