"""In-memory artifact cache for the generation service."""

import logging

from cachetools import TTLCache

from core.utils.caching import generate_cache_key

from .config import GenerationConfig, get_generation_config

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Bounded cache of sanitized artifacts keyed by request content.

    The key covers the submitted text, the style and the output format, so
    identical requests for the same style return the same artifact without
    contacting the service. Entries expire after cache_ttl seconds; when the
    cache is full the least recently used entry is evicted.
    """

    def __init__(self, config: GenerationConfig | None = None):
        config = config or get_generation_config()
        self._format = config.output_format
        self._cache: TTLCache = TTLCache(
            maxsize=config.cache_max_entries, ttl=config.cache_ttl
        )

    def key(self, text: str, style_id: str | None = None) -> str:
        return generate_cache_key("diagram", text, style_id or "", self._format)

    def get(self, text: str, style_id: str | None = None) -> str | None:
        content = self._cache.get(self.key(text, style_id))
        if content is not None:
            logger.debug(f"Artifact cache hit ({len(text)} chars, style={style_id})")
        return content

    def put(self, text: str, style_id: str | None, content: str) -> None:
        self._cache[self.key(text, style_id)] = content

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
