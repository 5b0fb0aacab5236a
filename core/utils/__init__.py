"""Core utilities for async HTTP clients, cache keys, and error handling."""

from .async_context import AsyncContextManager
from .async_http_client import (
    BaseAsyncHttpClient,
    cleanup_all_clients,
    register_cleanup,
)
from .caching import generate_cache_key
from .http_errors import safe_http_request

__all__ = [
    "AsyncContextManager",
    "BaseAsyncHttpClient",
    "cleanup_all_clients",
    "register_cleanup",
    "generate_cache_key",
    "safe_http_request",
]
