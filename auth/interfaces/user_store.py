"""User store interface."""

from __future__ import annotations

from typing import Protocol

from auth.models import User


class UserStore(Protocol):
    async def create(self, user: User) -> None:
        """Persist a new user; raises UserAlreadyExists on a duplicate login."""
        ...

    async def get_by_login(self, login: str) -> User:
        """Raises UserNotFound when no user has this login."""
        ...

    async def get_by_id(self, user_id: str) -> User:
        """Raises UserNotFound when the id is unknown."""
        ...
