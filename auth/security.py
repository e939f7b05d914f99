"""Security utilities for auth."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from argon2.low_level import Type, hash_secret_raw
from jose import JWTError, jwt

from auth.exceptions import InvalidHashFormat, InvalidToken
from auth.models import utcnow

ARGON2_TIME_COST = 1
ARGON2_MEMORY_COST = 64 * 1024  # KiB
ARGON2_PARALLELISM = 4
ARGON2_SALT_LENGTH = 16
ARGON2_HASH_LENGTH = 32

HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


def new_token(size: int = 32) -> str:
    """Random URL-safe secret without padding."""
    return base64.urlsafe_b64encode(secrets.token_bytes(size)).rstrip(b"=").decode("ascii")


def hash_token(token: str) -> bytes:
    return hashlib.sha256(token.encode("utf-8")).digest()


def new_salt(size: int = 16) -> bytes:
    return secrets.token_bytes(size)


class PasswordHasher:
    """
    Argon2id password hasher.

    The encoded form is the raw salt followed by the raw digest, so both
    lengths are fixed and shared by hash() and verify(). Changing either
    constant invalidates every stored hash.
    """

    def __init__(
        self,
        time_cost: int = ARGON2_TIME_COST,
        memory_cost: int = ARGON2_MEMORY_COST,
        parallelism: int = ARGON2_PARALLELISM,
        salt_length: int = ARGON2_SALT_LENGTH,
        hash_length: int = ARGON2_HASH_LENGTH,
    ) -> None:
        self._time_cost = time_cost
        self._memory_cost = memory_cost
        self._parallelism = parallelism
        self._salt_length = salt_length
        self._hash_length = hash_length

    @property
    def encoded_length(self) -> int:
        return self._salt_length + self._hash_length

    def _derive(self, password: str, salt: bytes) -> bytes:
        return hash_secret_raw(
            secret=password.encode("utf-8"),
            salt=salt,
            time_cost=self._time_cost,
            memory_cost=self._memory_cost,
            parallelism=self._parallelism,
            hash_len=self._hash_length,
            type=Type.ID,
        )

    def hash(self, password: str) -> bytes:
        salt = new_salt(self._salt_length)
        return salt + self._derive(password, salt)

    def verify(self, password: str, encoded: bytes) -> bool:
        if len(encoded) != self.encoded_length:
            raise InvalidHashFormat()
        salt = encoded[: self._salt_length]
        stored = encoded[self._salt_length :]
        return hmac.compare_digest(stored, self._derive(password, salt))


class TokenCodec:
    """Signs and verifies short-lived access tokens (HMAC JWT)."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, subject: str, ttl: timedelta, now: datetime | None = None) -> str:
        issued_at = now or utcnow()
        payload: dict[str, Any] = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the token subject; every other claim is ignored by callers.

        Any HMAC variant signed with the shared secret is accepted, whichever
        one this codec issues with.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=sorted(HMAC_ALGORITHMS),
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as exc:
            raise InvalidToken() from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
