"""Shared asynchronous HTTP client used to execute tool calls."""

import json
from typing import Any, Dict, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)


class ApiClientError(Exception):
    """Raised when an upstream API call fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ApiClient:
    """Asynchronous client shared by all tool calls.

    Each tool carries its own base URL, so requests take absolute URLs. The
    underlying ``httpx.AsyncClient`` is safe for concurrent requests.
    """

    def __init__(self, timeout: Optional[float] = 30.0):
        self.timeout = timeout
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def _ensure_client(self):
        if not self.client:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
            )

    async def aclose(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    # ------------------------------------------------------------------
    # Core HTTP method (used by the dispatcher)
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send one request and return the decoded response payload."""
        await self._ensure_client()

        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self.client.request(
                method=method, url=url, params=params, headers=headers, **kwargs
            )
        except httpx.RequestError as e:
            logger.error("Request error", error=str(e), method=method, url=url)
            raise ApiClientError(f"Request failed: {e}") from e

        logger.info(
            "API request",
            method=method,
            url=url,
            status_code=response.status_code,
        )

        body = self._decode(response)
        if not response.is_success:
            error_msg = f"API request failed: {response.status_code}"
            if response.reason_phrase:
                error_msg += f" {response.reason_phrase}"
            if body not in (None, ""):
                detail = body if isinstance(body, str) else json.dumps(body)
                error_msg += f" - {detail}"
            raise ApiClientError(error_msg, response.status_code, body)

        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Decoded JSON for JSON content types, else text; None when empty."""
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                pass
        return response.text
