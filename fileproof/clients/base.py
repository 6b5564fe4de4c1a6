"""Base HTTP client for fileproof's node access.

Provides:
- Rate limiting (token bucket)
- One overall deadline per request, body included
- No retries: callers decide what a failure means
- Structured error handling: every transport problem becomes APIError

JSON-RPC clients build on post_json().
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class RateLimiter:
    """Simple token-bucket rate limiter."""

    max_per_second: float
    _tokens: float = field(init=False)
    _last_refill: float = field(init=False)

    def __post_init__(self) -> None:
        self._tokens = self.max_per_second
        self._last_refill = time.monotonic()

    def acquire(self) -> float:
        """Acquire a token. Returns wait time in seconds (0 if immediate)."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.max_per_second, self._tokens + elapsed * self.max_per_second)
        self._last_refill = now

        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return 0.0

        return (1.0 - self._tokens) / self.max_per_second


class APIError(Exception):
    """Structured transport error."""

    def __init__(self, message: str, status_code: int = 0, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider
        self.retryable = retryable


class ResponseDecodeError(APIError):
    """HTTP exchange succeeded but the body was not JSON."""

    def __init__(self, message: str, body: str = "", provider: str = ""):
        super().__init__(message, status_code=200, provider=provider, retryable=False)
        self.body = body


class BaseClient:
    """Async HTTP client with rate limiting and a per-request deadline.

    Usage:
        client = BaseClient(
            base_url="https://rpc.example.com",
            rate_limit=5.0,  # 5 req/sec
            timeout=10.0,
        )
        data = await client.post_json("", {"jsonrpc": "2.0", ...})
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        rate_limit: float = 10.0,
        timeout: float = 10.0,
        provider_name: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.provider_name = provider_name
        self.timeout = timeout
        self._rate_limiter = RateLimiter(max_per_second=rate_limit)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def post_json(
        self,
        path: str,
        json_data: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body and return the decoded JSON response.

        The whole exchange, body included, is bounded by ``timeout``.
        """
        wait = self._rate_limiter.acquire()
        if wait > 0:
            await asyncio.sleep(wait)

        try:
            response = await asyncio.wait_for(
                self._client.post(path, json=json_data, headers=headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise APIError(
                f"Timeout after {self.timeout}s talking to {self.provider_name}: {e!r}",
                provider=self.provider_name,
                retryable=True,
            ) from e
        except httpx.InvalidURL as e:
            raise APIError(
                f"Invalid URL for {self.provider_name}: {e}",
                provider=self.provider_name,
            ) from e
        except httpx.HTTPError as e:
            raise APIError(
                f"Connection error to {self.provider_name}: {e}",
                provider=self.provider_name,
                retryable=True,
            ) from e

        if response.status_code >= 500:
            raise APIError(
                f"Server error from {self.provider_name}: {response.status_code}",
                status_code=response.status_code,
                provider=self.provider_name,
                retryable=True,
            )

        if response.status_code >= 400:
            raise APIError(
                f"Client error from {self.provider_name}: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
                provider=self.provider_name,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"Non-JSON body from {self.provider_name}: {e}",
                body=response.text[:200],
                provider=self.provider_name,
            ) from e
