"""Auth configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv


def _parse_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def load_env_file() -> None:
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for auth flows."""

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    database_url: str = "sqlite:///pkeeper.db"
    # "sql" (production) or "memory" (testing)
    auth_store: str = "sql"

    argon2_time_cost: int = 1
    argon2_memory_cost: int = 64 * 1024  # KiB
    argon2_parallelism: int = 4

    refresh_token_bytes: int = 32
    kdf_salt_bytes: int = 16

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_expire_days)

    @classmethod
    def from_env(cls) -> AuthConfig:
        load_env_file()
        defaults = cls()
        return cls(
            jwt_secret=os.getenv("AUTH_JWT_SECRET", defaults.jwt_secret),
            jwt_algorithm=os.getenv("AUTH_JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=_parse_int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES"), defaults.access_token_expire_minutes
            ),
            refresh_token_expire_days=_parse_int(
                os.getenv("REFRESH_TOKEN_EXPIRE_DAYS"), defaults.refresh_token_expire_days
            ),
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            auth_store=os.getenv("AUTH_STORE", defaults.auth_store),
            argon2_time_cost=_parse_int(os.getenv("ARGON2_TIME_COST"), defaults.argon2_time_cost),
            argon2_memory_cost=_parse_int(
                os.getenv("ARGON2_MEMORY_COST"), defaults.argon2_memory_cost
            ),
            argon2_parallelism=_parse_int(
                os.getenv("ARGON2_PARALLELISM"), defaults.argon2_parallelism
            ),
        )
