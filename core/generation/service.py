"""Diagram generation service: cache, submit, poll and fetch."""

import logging
from typing import Optional, Protocol

from core.utils.async_http_client import register_cleanup

from .cache import ArtifactCache
from .client import GenerationClient
from .config import GenerationConfig, get_generation_config
from .errors import GenerationFailedError
from .types import Artifact, SubmitOptions

logger = logging.getLogger(__name__)


class DiagramGenerator(Protocol):
    """Anything that turns a passage of text into an artifact."""

    async def generate(
        self,
        text: str,
        options: Optional[SubmitOptions] = None,
        section_id: str = "",
        segment_id: str | None = None,
    ) -> Artifact: ...


class GenerationService:
    """Generate one diagram per call, with an in-memory artifact cache.

    Each call is a single attempt: rate limits, auth failures and service
    errors propagate as GenerationError subclasses for the caller to retry
    or give up on.

    Usage:
        service = get_generation_service()
        artifact = await service.generate(text, SubmitOptions(style_id="..."), "s1")
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        client: GenerationClient | None = None,
        cache: ArtifactCache | None = None,
    ):
        self._config = config or get_generation_config()
        self._client = client or GenerationClient(self._config)
        self._cache = cache or ArtifactCache(self._config)

    @property
    def cache(self) -> ArtifactCache:
        return self._cache

    async def generate(
        self,
        text: str,
        options: Optional[SubmitOptions] = None,
        section_id: str = "",
        segment_id: str | None = None,
    ) -> Artifact:
        """Generate (or reuse) an artifact for text.

        Args:
            text: Passage to visualize, truncated to the service limit
            options: Style, language and surrounding context
            section_id: Section the passage came from
            segment_id: Segment the passage came from, if segmented

        Returns:
            Artifact with sanitized content

        Raises:
            GenerationFailedError: Request failed or listed no artifacts
            GenerationError: Any other service failure
        """
        options = options or SubmitOptions()
        content = text[: self._config.max_chars].strip()
        fingerprint = self._cache.key(content, options.style_id)

        cached = self._cache.get(content, options.style_id)
        if cached is not None:
            return Artifact(
                content=cached,
                source_section_id=section_id,
                source_segment_id=segment_id,
                fingerprint=fingerprint,
                cached=True,
            )

        request_id = await self._client.submit(content, options)
        request = await self._client.poll(request_id)
        if not request.artifact_refs:
            raise GenerationFailedError(
                f"Request {request_id} completed without artifacts", request_id
            )

        svg = await self._client.fetch(request.artifact_refs[0])
        self._cache.put(content, options.style_id, svg)
        logger.info(
            f"Generated diagram for section {section_id}"
            + (f" segment {segment_id}" if segment_id else "")
        )
        return Artifact(
            content=svg,
            source_section_id=section_id,
            source_segment_id=segment_id,
            fingerprint=fingerprint,
        )

    async def close(self) -> None:
        await self._client.close()


_service: GenerationService | None = None


def get_generation_service() -> GenerationService:
    """Get global GenerationService instance."""
    global _service
    if _service is None:
        _service = GenerationService()
        register_cleanup("generation", _service.close)
    return _service
