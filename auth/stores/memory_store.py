"""In-memory auth stores."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime

from auth.exceptions import TokenExpired, TokenNotFound, UserAlreadyExists, UserNotFound
from auth.models import RefreshToken, User


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_login: dict[str, User] = {}
        self._users_by_id: dict[str, User] = {}

    async def create(self, user: User) -> None:
        async with self._lock:
            if user.login in self._users_by_login:
                raise UserAlreadyExists()
            self._users_by_login[user.login] = user
            self._users_by_id[user.id] = user

    async def get_by_login(self, login: str) -> User:
        async with self._lock:
            user = self._users_by_login.get(login)
            if user is None:
                raise UserNotFound()
            return user

    async def get_by_id(self, user_id: str) -> User:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            if user is None:
                raise UserNotFound()
            return user


class MemoryRefreshTokenStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._by_hash: dict[bytes, RefreshToken] = {}

    def __len__(self) -> int:
        return len(self._by_hash)

    async def create(self, token: RefreshToken) -> None:
        async with self._lock:
            self._by_hash[token.token_hash] = token

    async def get_by_hash(self, token_hash: bytes) -> RefreshToken:
        async with self._lock:
            token = self._by_hash.get(token_hash)
            if token is None:
                raise TokenNotFound()
            return token

    async def delete(self, token_id: str) -> None:
        async with self._lock:
            for token_hash, token in list(self._by_hash.items()):
                if token.id == token_id:
                    del self._by_hash[token_hash]

    async def rotate(
        self, token_hash: bytes, now: datetime, next_token: RefreshToken
    ) -> RefreshToken:
        async with self._lock:
            current = self._by_hash.pop(token_hash, None)
            if current is None:
                raise TokenNotFound()
            if current.expires_at <= now:
                raise TokenExpired()
            successor = dataclasses.replace(next_token, user_id=current.user_id)
            self._by_hash[successor.token_hash] = successor
            return current
