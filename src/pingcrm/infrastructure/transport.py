"""HTTP transport for the CRM API (httpx). Adds the bearer token and classifies failures."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from pingcrm.errors import (
    ApiError,
    AuthError,
    ClientError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
)
from pingcrm.infrastructure.session import get_token

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:500] or None
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if detail is not None:
            return detail if isinstance(detail, str) else str(detail)
    return None


def classify(response: httpx.Response) -> ApiError:
    """Map a non-2xx response to an ApiError subclass and log it."""
    status = response.status_code
    detail = _error_detail(response)
    if status == 401:
        logger.error("Authentication error: please login again")
        return AuthError("Authentication required", status_code=status, detail=detail)
    if status == 403:
        logger.error("Permission denied: you do not have access to this resource")
        return PermissionDeniedError("Permission denied", status_code=status, detail=detail)
    if status == 404:
        logger.error("Resource not found: %s", response.request.url)
        return NotFoundError("Resource not found", status_code=status, detail=detail)
    if status >= 500:
        logger.error("Server error %s: %s", status, (detail or "")[:500])
        return ServerError("Server error", status_code=status, detail=detail)
    logger.warning("Request rejected %s: %s", status, detail)
    return ClientError("Request rejected", status_code=status, detail=detail)


class HttpTransport:
    """Sends JSON requests under one base URL. One attempt per call; no retries."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        token_provider: Callable[[], str | None] = get_token,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self._token_provider = token_provider

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        token = self._token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        url = path.lstrip("/")
        try:
            response = await self._client.request(
                method.upper(),
                url,
                params=params,
                json=body,
                headers=self._headers(),
            )
        except httpx.TransportError as e:
            logger.error("Network error: unable to reach the server (%s %s): %s", method, url, e)
            raise NetworkError("Unable to reach the server", detail=str(e)) from e
        if response.is_error:
            raise classify(response)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Invalid response body from %s %s: %s", method, url, response.text[:200])
            raise ServerError(
                "Invalid response body", status_code=response.status_code, detail=str(e)
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
