"""Base async HTTP client with lazy initialization and context manager support."""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from .async_context import AsyncContextManager

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Global Cleanup Registry
# ---------------------------------------------------------------------------

_cleanup_registry: list[tuple[str, Callable[[], Awaitable[None]]]] = []


def register_cleanup(name: str, closer: Callable[[], Awaitable[None]]) -> None:
    """Register a cleanup function to be called on shutdown."""
    _cleanup_registry.append((name, closer))


async def cleanup_all_clients() -> None:
    """Close all registered HTTP clients (idempotent)."""
    for name, closer in _cleanup_registry:
        try:
            await closer()
        except Exception as e:
            logger.warning(f"Error closing {name} client: {e}")


class BaseAsyncHttpClient(AsyncContextManager):
    """
    Base async HTTP client with lazy initialization.

    Provides:
    - Lazy httpx.AsyncClient initialization
    - Default headers (e.g. bearer auth) applied to every request
    - Optional transport injection (httpx.MockTransport in tests)
    - Context manager support
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
