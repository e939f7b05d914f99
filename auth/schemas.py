"""Auth request/response schemas."""

from __future__ import annotations

import base64

from pydantic import BaseModel, Field, field_validator

from auth.models import AuthResult


class AuthRequest(BaseModel):
    login: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("login")
    @classmethod
    def _strip_login(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("login must not be blank")
        return value


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class AuthResponse(BaseModel):
    user_id: str
    access_token: str
    refresh_token: str
    kdf_salt: str

    @classmethod
    def from_result(cls, result: AuthResult) -> AuthResponse:
        return cls(
            user_id=result.user_id,
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            kdf_salt=base64.b64encode(result.kdf_salt).decode("ascii"),
        )


class MeResponse(BaseModel):
    user_id: str
    login: str
