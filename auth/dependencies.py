"""Auth dependency helpers."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request

from auth.config import AuthConfig
from auth.exceptions import AuthException
from auth.interfaces.refresh_token_store import RefreshTokenStore
from auth.interfaces.user_store import UserStore
from auth.services.credential_service import CredentialService
from auth.stores.memory_store import MemoryRefreshTokenStore, MemoryUserStore
from auth.stores.sql_store import SQLRefreshTokenStore, SQLUserStore
from db.engine import create_db_engine, create_session_factory, init_db


def build_stores(config: AuthConfig) -> tuple[UserStore, RefreshTokenStore]:
    """Get auth stores based on the auth_store setting."""
    if config.auth_store == "memory":
        return MemoryUserStore(), MemoryRefreshTokenStore()
    if config.auth_store != "sql":
        raise ValueError(f"Unknown auth store: {config.auth_store}")
    engine = create_db_engine(config.database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)
    return SQLUserStore(session_factory), SQLRefreshTokenStore(session_factory)


def build_credential_service(config: AuthConfig) -> CredentialService:
    users, tokens = build_stores(config)
    return CredentialService(user_store=users, token_store=tokens, config=config)


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credential_service


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return token.strip()


def get_current_user_id(
    token: str = Depends(bearer_token),
    credential_service: CredentialService = Depends(get_credential_service),
) -> str:
    try:
        return credential_service.authenticate(token)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
