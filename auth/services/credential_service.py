"""Core credential service: signup, signin and refresh-token rotation."""

from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from auth.config import AuthConfig
from auth.exceptions import InvalidCredentials, TokenExpired, TokenNotFound, UserNotFound
from auth.interfaces.refresh_token_store import RefreshTokenStore
from auth.interfaces.user_store import UserStore
from auth.models import AuthResult, RefreshToken, User, utcnow
from auth.security import PasswordHasher, TokenCodec, hash_token, new_salt, new_token

logger = logging.getLogger(__name__)


class CredentialService:
    def __init__(
        self,
        user_store: UserStore,
        token_store: RefreshTokenStore,
        config: AuthConfig,
        hasher: PasswordHasher | None = None,
        codec: TokenCodec | None = None,
    ) -> None:
        self._users = user_store
        self._tokens = token_store
        self._config = config
        self._hasher = hasher or PasswordHasher(
            time_cost=config.argon2_time_cost,
            memory_cost=config.argon2_memory_cost,
            parallelism=config.argon2_parallelism,
        )
        self._codec = codec or TokenCodec(config.jwt_secret, config.jwt_algorithm)

    async def signup(self, login: str, password: str) -> AuthResult:
        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        user = User(
            id=str(uuid4()),
            login=login,
            password_hash=password_hash,
            kdf_salt=new_salt(self._config.kdf_salt_bytes),
            created_at=utcnow(),
        )
        await self._users.create(user)
        logger.info("Created user %s", user.id)
        return await self._issue_tokens(user)

    async def signin(self, login: str, password: str) -> AuthResult:
        try:
            user = await self._users.get_by_login(login)
        except UserNotFound as exc:
            logger.warning("Signin rejected: unknown login")
            raise InvalidCredentials() from exc

        valid = await asyncio.to_thread(self._hasher.verify, password, user.password_hash)
        if not valid:
            logger.warning("Signin rejected for user %s", user.id)
            raise InvalidCredentials()
        return await self._issue_tokens(user)

    async def refresh(self, refresh_token: str) -> AuthResult:
        now = utcnow()
        next_secret = new_token(self._config.refresh_token_bytes)
        # user_id is filled in by the store from the consumed record
        next_record = RefreshToken(
            id=str(uuid4()),
            user_id="",
            token_hash=hash_token(next_secret),
            expires_at=now + self._config.refresh_ttl,
            created_at=now,
        )

        try:
            rotated = await self._tokens.rotate(hash_token(refresh_token), now, next_record)
        except (TokenNotFound, TokenExpired) as exc:
            logger.warning("Refresh rejected: %s", exc.message)
            raise InvalidCredentials() from exc

        user = await self._users.get_by_id(rotated.user_id)
        logger.info("Rotated refresh token for user %s", user.id)
        return AuthResult(
            user_id=user.id,
            access_token=self._codec.issue(user.id, self._config.access_ttl),
            refresh_token=next_secret,
            kdf_salt=user.kdf_salt,
        )

    def authenticate(self, access_token: str) -> str:
        """Return the user id carried by a valid access token."""
        return self._codec.verify(access_token)

    async def get_user(self, user_id: str) -> User:
        return await self._users.get_by_id(user_id)

    async def _issue_tokens(self, user: User) -> AuthResult:
        now = utcnow()
        refresh_token = new_token(self._config.refresh_token_bytes)
        await self._tokens.create(
            RefreshToken(
                id=str(uuid4()),
                user_id=user.id,
                token_hash=hash_token(refresh_token),
                expires_at=now + self._config.refresh_ttl,
                created_at=now,
            )
        )
        return AuthResult(
            user_id=user.id,
            access_token=self._codec.issue(user.id, self._config.access_ttl, now=now),
            refresh_token=refresh_token,
            kdf_salt=user.kdf_salt,
        )
