"""HTTP client for the pkeeper API."""

from __future__ import annotations

from typing import Any

import httpx

from config import Config


class ApiError(Exception):
    """Non-2xx response from the server."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def is_http_status(exc: BaseException, status_code: int) -> bool:
    return isinstance(exc, ApiError) and exc.status_code == status_code


def is_unauthorized(exc: BaseException) -> bool:
    return is_http_status(exc, 401)


def _auth_header(access_token: str | None) -> dict[str, str]:
    if not access_token or not access_token.strip():
        return {}
    return {"Authorization": f"Bearer {access_token}"}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase


class ApiClient:
    """
    Thin JSON client over httpx.AsyncClient.

    Pass ``http_client`` to share a connection pool or to plug in a test
    transport; otherwise a client is created per request.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._timeout = timeout

    async def request_json(
        self,
        method: str,
        path: str,
        access_token: str | None = None,
        payload: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        headers = _auth_header(access_token)
        if self._http_client is not None:
            response = await self._http_client.request(
                method, url, json=payload, params=params, headers=headers
            )
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method, url, json=payload, params=params, headers=headers
                )

        if response.status_code < 200 or response.status_code >= 300:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        return response.json()

    async def signup(self, login: str, password: str) -> dict[str, Any]:
        return await self.request_json(
            "POST", "/auth/signup", payload={"login": login, "password": password}
        )

    async def signin(self, login: str, password: str) -> dict[str, Any]:
        return await self.request_json(
            "POST", "/auth/signin", payload={"login": login, "password": password}
        )

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        return await self.request_json(
            "POST", "/auth/refresh", payload={"refresh_token": refresh_token}
        )

    async def me(self, access_token: str) -> dict[str, Any]:
        return await self.request_json("GET", "/auth/me", access_token=access_token)
