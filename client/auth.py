"""Client auth flows: each successful call replaces the cached session."""

from __future__ import annotations

import logging
from typing import Any

from client.api import ApiClient
from client.session import Session, SessionCache, effective_server_url

logger = logging.getLogger(__name__)


class ClientConfigError(Exception):
    pass


def _session_from_response(server_url: str, response: dict[str, Any]) -> Session:
    return Session(
        server_url=server_url,
        user_id=response["user_id"],
        access_token=response["access_token"],
        refresh_token=response["refresh_token"],
        kdf_salt=response["kdf_salt"],
    )


def _require_server_url(override: str | None, stored: str | None = None) -> str:
    server_url = effective_server_url(override, stored)
    if not server_url:
        raise ClientConfigError("server URL is required (--server or SERVER_URL)")
    return server_url


async def signup(
    cache: SessionCache,
    login: str,
    password: str,
    server_url: str | None = None,
    api: ApiClient | None = None,
) -> Session:
    server_url = _require_server_url(server_url)
    api = api or ApiClient(server_url)
    session = _session_from_response(server_url, await api.signup(login, password))
    cache.save(session)
    logger.info("Signed up as user %s", session.user_id)
    return session


async def signin(
    cache: SessionCache,
    login: str,
    password: str,
    server_url: str | None = None,
    api: ApiClient | None = None,
) -> Session:
    server_url = _require_server_url(server_url)
    api = api or ApiClient(server_url)
    session = _session_from_response(server_url, await api.signin(login, password))
    cache.save(session)
    logger.info("Signed in as user %s", session.user_id)
    return session


async def refresh(
    cache: SessionCache,
    server_url: str | None = None,
    api: ApiClient | None = None,
) -> Session:
    """Rotate the cached refresh token explicitly."""
    session = cache.load()
    server_url = _require_server_url(server_url, session.server_url)
    if not session.refresh_token:
        raise ClientConfigError("refresh token is missing, run signin or signup")
    api = api or ApiClient(server_url)
    response = await api.refresh(session.refresh_token)
    session = session.model_copy(update={"server_url": server_url}).with_tokens(
        user_id=response["user_id"],
        access_token=response["access_token"],
        refresh_token=response["refresh_token"],
        kdf_salt=response["kdf_salt"],
    )
    cache.save(session)
    return session
