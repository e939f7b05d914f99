"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from auth.dependencies import get_credential_service, get_current_user_id
from auth.exceptions import AuthException
from auth.schemas import AuthRequest, AuthResponse, MeResponse, RefreshRequest
from auth.services.credential_service import CredentialService

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def signup(
    payload: AuthRequest,
    credential_service: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    try:
        result = await credential_service.signup(payload.login, payload.password)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return AuthResponse.from_result(result)


@router.post("/signin", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def signin(
    payload: AuthRequest,
    credential_service: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    try:
        result = await credential_service.signin(payload.login, payload.password)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return AuthResponse.from_result(result)


@router.post("/refresh", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def refresh(
    payload: RefreshRequest,
    credential_service: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    try:
        result = await credential_service.refresh(payload.refresh_token)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return AuthResponse.from_result(result)


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: str = Depends(get_current_user_id),
    credential_service: CredentialService = Depends(get_credential_service),
) -> MeResponse:
    try:
        user = await credential_service.get_user(user_id)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return MeResponse(user_id=user.id, login=user.login)
