"""HTTP error handling utilities."""

import logging
from typing import Any, Type

import httpx

logger = logging.getLogger(__name__)


async def safe_http_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    error_class: Type[Exception],
    **kwargs: Any,
) -> httpx.Response:
    """
    Make an HTTP request, converting transport failures to error_class.

    Status codes are left to the caller: services differ in which statuses
    are retryable, fatal or per-request errors.

    Args:
        client: httpx.AsyncClient instance
        method: HTTP method (GET, POST, etc.)
        url: Request path (relative to the client's base URL) or absolute URL
        error_class: Exception class raised on connection errors and timeouts
        **kwargs: Additional arguments for request

    Returns:
        Response object (any status)

    Raises:
        error_class: On connection errors, timeouts and other transport errors
    """
    try:
        return await client.request(method, url, **kwargs)
    except httpx.ConnectError as e:
        logger.error(f"Connection failed to {client.base_url}{url}: {e}")
        raise error_class(f"Connection failed: {e}") from e
    except httpx.TimeoutException as e:
        logger.error(f"Request timeout for {client.base_url}{url}: {e}")
        raise error_class(f"Request timeout: {e}") from e
    except httpx.TransportError as e:
        logger.error(f"Transport error for {client.base_url}{url}: {e}")
        raise error_class(f"Request failed: {e}") from e
