"""Refresh token store interface."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from auth.models import RefreshToken


class RefreshTokenStore(Protocol):
    async def create(self, token: RefreshToken) -> None:
        ...

    async def get_by_hash(self, token_hash: bytes) -> RefreshToken:
        """Raises TokenNotFound when no live record matches."""
        ...

    async def delete(self, token_id: str) -> None:
        """Remove a record. Deleting an absent record is not an error."""
        ...

    async def rotate(
        self, token_hash: bytes, now: datetime, next_token: RefreshToken
    ) -> RefreshToken:
        """
        Consume the record matching ``token_hash`` and store ``next_token``.

        The old record is deleted whatever the outcome. Raises TokenNotFound
        when no record matches and TokenExpired when the matched record had
        already expired at ``now``; in both cases nothing is inserted. On
        success ``next_token`` is stored under the old record's user and the
        old record is returned.
        """
        ...
