"""Configuration for the diagram generation client."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass
class GenerationConfig:
    """Configuration for the external diagram generation service.

    Environment Variables:
        DIAGRAM_API_BASE_URL: Service base URL (default: https://api.napkin.ai/v1)
        DIAGRAM_API_TOKEN: Bearer token (required)
        DIAGRAM_API_TIMEOUT: Per-request HTTP timeout in seconds (default: 30)
        DIAGRAM_OUTPUT_FORMAT: Requested artifact format (default: svg)
        DIAGRAM_LANGUAGE: Optional language code sent with each request
        DIAGRAM_POLL_INTERVAL: Initial poll interval in seconds (default: 2)
        DIAGRAM_POLL_MAX_INTERVAL: Poll interval cap in seconds (default: 10)
        DIAGRAM_POLL_TIMEOUT: Absolute poll timeout in seconds (default: 60)
        DIAGRAM_CACHE_SIZE: Max cached artifacts (default: 100)
        DIAGRAM_CACHE_TTL: Cached artifact lifetime in seconds (default: 1800)
    """

    base_url: str = field(
        default_factory=lambda: os.environ.get(
            "DIAGRAM_API_BASE_URL", "https://api.napkin.ai/v1"
        )
    )
    api_token: str | None = field(
        default_factory=lambda: os.environ.get("DIAGRAM_API_TOKEN")
    )
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("DIAGRAM_API_TIMEOUT", "30"))
    )
    output_format: str = field(
        default_factory=lambda: os.environ.get("DIAGRAM_OUTPUT_FORMAT", "svg")
    )
    language: str | None = field(
        default_factory=lambda: os.environ.get("DIAGRAM_LANGUAGE")
    )
    max_chars: int = 2000
    default_retry_after: float = 60.0

    # Polling
    poll_initial_interval: float = field(
        default_factory=lambda: float(os.environ.get("DIAGRAM_POLL_INTERVAL", "2"))
    )
    poll_max_interval: float = field(
        default_factory=lambda: float(os.environ.get("DIAGRAM_POLL_MAX_INTERVAL", "10"))
    )
    poll_backoff: float = 1.5
    poll_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DIAGRAM_POLL_TIMEOUT", "60"))
    )

    # Artifact cache
    cache_max_entries: int = field(
        default_factory=lambda: int(os.environ.get("DIAGRAM_CACHE_SIZE", "100"))
    )
    cache_ttl: int = field(
        default_factory=lambda: int(os.environ.get("DIAGRAM_CACHE_TTL", "1800"))
    )

    @property
    def is_configured(self) -> bool:
        """Check if a service token is available."""
        return bool(self.api_token)


_config: GenerationConfig | None = None


def get_generation_config() -> GenerationConfig:
    """Get global GenerationConfig instance."""
    global _config
    if _config is None:
        _config = GenerationConfig()
    return _config
