"""
Authenticated HTTP client for cloud provider REST APIs.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from contextvars import ContextVar

logger = logging.getLogger(__name__)

# Correlation id for the current lifecycle operation, forwarded to the provider
operation_id_ctx: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


class ProviderHttpClient:
    """
    HTTP client for talking to a provider API with a bearer token.

    Features:
    - Lazily created, shared AsyncClient instance.
    - Automatic Authorization header injection.
    - Operation ID forwarding for tracing.
    - Mandatory finite timeout on every request.
    - Non-2xx responses raise httpx.HTTPStatusError after being logged.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str,
        timeout_seconds: float = 30.0,
        max_connections: int = 20,
        max_keepalive: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if timeout_seconds is None or timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be a positive number")
        self._api_token = api_token
        self._base_url = base_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                limits=self._limits,
                transport=self._transport,
            )
        return self._client

    def get_default_headers(self) -> Dict[str, str]:
        """Base headers required for all provider requests."""
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

        op_id = operation_id_ctx.get()
        if op_id:
            headers["X-Request-ID"] = op_id

        return headers

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise for 4xx/5xx responses."""
        headers = kwargs.pop("headers", {})
        merged_headers = {**self.get_default_headers(), **headers}

        try:
            response = await self.client.request(
                method, url, headers=merged_headers, **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Provider request failed: {method} {url} - "
                f"{e.response.status_code} {_error_code(e.response)}"
            )
            raise
        except httpx.HTTPError as e:
            logger.error(f"Provider request failed: {method} {url} - {str(e)}")
            raise

        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


def _error_code(response: httpx.Response) -> str:
    # Hetzner wraps failures as {"error": {"code": ..., "message": ...}}
    try:
        body = response.json()
    except ValueError:
        return ""
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return ""
    return f"{error.get('code', '')}: {error.get('message', '')}".strip(": ")
