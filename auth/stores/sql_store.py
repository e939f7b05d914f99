"""Relational auth stores using SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from auth.exceptions import (
    StoreError,
    TokenExpired,
    TokenNotFound,
    UserAlreadyExists,
    UserNotFound,
)
from auth.models import RefreshToken, User
from db.models.auth import RefreshTokenRow
from db.models.user import UserRow

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        login=row.login,
        password_hash=bytes(row.password_hash),
        kdf_salt=bytes(row.kdf_salt),
        created_at=_as_utc(row.created_at),
    )


def _to_refresh_token(row: RefreshTokenRow) -> RefreshToken:
    return RefreshToken(
        id=row.id,
        user_id=row.user_id,
        token_hash=bytes(row.token_hash),
        expires_at=_as_utc(row.expires_at),
        created_at=_as_utc(row.created_at),
    )


class SQLStoreBase:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()


class SQLUserStore(SQLStoreBase):
    """User store backed by a relational database."""

    async def create(self, user: User) -> None:
        try:
            with self._get_session() as db:
                db.add(
                    UserRow(
                        id=user.id,
                        login=user.login,
                        password_hash=user.password_hash,
                        kdf_salt=user.kdf_salt,
                        created_at=user.created_at,
                    )
                )
                db.commit()
        except IntegrityError as exc:
            raise UserAlreadyExists() from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create user: %s", exc)
            raise StoreError() from exc

    async def get_by_login(self, login: str) -> User:
        try:
            with self._get_session() as db:
                row = db.execute(
                    select(UserRow).where(UserRow.login == login)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        if row is None:
            raise UserNotFound()
        return _to_user(row)

    async def get_by_id(self, user_id: str) -> User:
        try:
            with self._get_session() as db:
                row = db.execute(
                    select(UserRow).where(UserRow.id == user_id)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        if row is None:
            raise UserNotFound()
        return _to_user(row)


class SQLRefreshTokenStore(SQLStoreBase):
    """Refresh token store backed by a relational database."""

    async def create(self, token: RefreshToken) -> None:
        try:
            with self._get_session() as db:
                db.add(
                    RefreshTokenRow(
                        id=token.id,
                        user_id=token.user_id,
                        token_hash=token.token_hash,
                        expires_at=token.expires_at,
                        created_at=token.created_at,
                    )
                )
                db.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to store refresh token: %s", exc)
            raise StoreError() from exc

    async def get_by_hash(self, token_hash: bytes) -> RefreshToken:
        try:
            with self._get_session() as db:
                row = db.execute(
                    select(RefreshTokenRow).where(RefreshTokenRow.token_hash == token_hash)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        if row is None:
            raise TokenNotFound()
        return _to_refresh_token(row)

    async def delete(self, token_id: str) -> None:
        try:
            with self._get_session() as db:
                db.execute(delete(RefreshTokenRow).where(RefreshTokenRow.id == token_id))
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    async def rotate(
        self, token_hash: bytes, now: datetime, next_token: RefreshToken
    ) -> RefreshToken:
        try:
            with self._get_session() as db:
                row = db.execute(
                    select(RefreshTokenRow)
                    .where(RefreshTokenRow.token_hash == token_hash)
                    .with_for_update()
                ).scalar_one_or_none()
                if row is None:
                    raise TokenNotFound()
                current = _to_refresh_token(row)

                # A concurrent rotation may have removed the row between the
                # read and this delete on backends without row locks.
                result = db.execute(
                    delete(RefreshTokenRow)
                    .where(RefreshTokenRow.id == current.id)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    db.rollback()
                    raise TokenNotFound()

                if current.expires_at <= now:
                    db.commit()
                    raise TokenExpired()

                db.add(
                    RefreshTokenRow(
                        id=next_token.id,
                        user_id=current.user_id,
                        token_hash=next_token.token_hash,
                        expires_at=next_token.expires_at,
                        created_at=next_token.created_at,
                    )
                )
                db.commit()
                return current
        except SQLAlchemyError as exc:
            logger.error("Refresh token rotation failed: %s", exc)
            raise StoreError() from exc
