"""Client session model and its on-disk cache."""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

from config import Config

logger = logging.getLogger(__name__)


class SessionNotFound(Exception):
    """No session has been saved yet."""


class SessionCorrupted(Exception):
    pass


class Session(BaseModel):
    server_url: str = ""
    user_id: str = ""
    access_token: str = ""
    refresh_token: str = ""
    # base64, as returned by the server
    kdf_salt: str = ""
    last_sync_at: str | None = None

    def with_tokens(
        self, user_id: str, access_token: str, refresh_token: str, kdf_salt: str
    ) -> Session:
        """Copy with a complete new token set; a session never mixes generations."""
        return self.model_copy(
            update={
                "user_id": user_id,
                "access_token": access_token,
                "refresh_token": refresh_token,
                "kdf_salt": kdf_salt,
            }
        )

    def kdf_salt_bytes(self) -> bytes:
        return base64.b64decode(self.kdf_salt) if self.kdf_salt else b""

    @property
    def authorized(self) -> bool:
        return has_authorized_tokens(self.access_token, self.refresh_token)


def has_authorized_tokens(access_token: str, refresh_token: str) -> bool:
    return bool(access_token.strip()) and bool(refresh_token.strip())


def effective_server_url(override: str | None, stored: str | None) -> str:
    """Pick the server URL: explicit override, then SERVER_URL, then the stored one."""
    for candidate in (override, Config.server_url(), stored):
        if candidate and candidate.strip():
            return candidate.strip().rstrip("/")
    return ""


class SessionCache(Protocol):
    def load(self) -> Session:
        """Raises SessionNotFound when nothing has been saved."""
        ...

    def save(self, session: Session) -> None:
        ...


class FileSessionCache:
    """Session stored as JSON, readable only by the owner."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else Config.session_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise SessionNotFound(str(self._path)) from exc
        try:
            return Session.model_validate_json(raw)
        except ValidationError as exc:
            raise SessionCorrupted(f"Unreadable session file {self._path}") from exc

    def save(self, session: Session) -> None:
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        encoded = session.model_dump_json(indent=2)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(encoded)
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("Saved session to %s", self._path)


class MemorySessionCache:
    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    def load(self) -> Session:
        if self._session is None:
            raise SessionNotFound("no session")
        return self._session

    def save(self, session: Session) -> None:
        self._session = session
