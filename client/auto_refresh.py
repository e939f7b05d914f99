"""Retry an authenticated call once after rotating an expired session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from client.api import ApiClient, is_unauthorized
from client.session import Session, SessionCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

AuthorizedCall = Callable[[str], Awaitable[T]]


class AutoRefreshExecutor:
    """
    Runs ``call(access_token)`` and, on a 401, refreshes the session and
    retries exactly once.

    Calls through one executor are serialized, so a refresh token is never
    sent twice in parallel. The refreshed session is saved to the cache
    before the retry and returned to the caller, who must use it from then on.
    """

    def __init__(self, api: ApiClient, cache: SessionCache) -> None:
        self._api = api
        self._cache = cache
        self._lock = asyncio.Lock()

    async def execute(self, session: Session, call: AuthorizedCall[T]) -> tuple[Session, T]:
        async with self._lock:
            try:
                return session, await call(session.access_token)
            except Exception as exc:
                if not is_unauthorized(exc) or not session.refresh_token:
                    raise

            session = await self._refresh(session)
            return session, await call(session.access_token)

    async def _refresh(self, session: Session) -> Session:
        logger.info("Access token rejected, refreshing session")
        # Refresh errors propagate with the session untouched.
        refreshed = await self._api.refresh(session.refresh_token)
        session = session.with_tokens(
            user_id=refreshed["user_id"],
            access_token=refreshed["access_token"],
            refresh_token=refreshed["refresh_token"],
            kdf_salt=refreshed["kdf_salt"],
        )
        # The old refresh token is spent; keep the new one even if the retry fails.
        self._cache.save(session)
        return session
