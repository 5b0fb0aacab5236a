"""Client for the external diagram generation service.

Submits text, polls until the request completes, downloads the artifact and
strips executable content from it. Identical requests are served from an
in-memory cache.

Example:
    from core.generation import SubmitOptions, get_generation_service

    service = get_generation_service()
    artifact = await service.generate(
        "Requests pass through the gateway, then the queue...",
        SubmitOptions(style_id="CSQQ4VB1DGPP4V31CDNJTVKFBXK6JV3C"),
        section_id="s2",
    )
    print(artifact.content)

Environment Variables:
    DIAGRAM_API_TOKEN: Bearer token for the service (required)
    DIAGRAM_API_BASE_URL: Service base URL
"""

from .cache import ArtifactCache
from .client import GenerationClient
from .config import GenerationConfig, get_generation_config
from .errors import (
    AuthFailureError,
    GenerationError,
    GenerationFailedError,
    GenerationTimeoutError,
    InvalidRequestError,
    RateLimitedError,
    ServiceUnavailableError,
)
from .sanitize import sanitize_svg
from .service import DiagramGenerator, GenerationService, get_generation_service
from .types import Artifact, GenerationRequest, GenerationStatus, SubmitOptions

__all__ = [
    # Service
    "get_generation_service",
    "GenerationService",
    "DiagramGenerator",
    "GenerationClient",
    "ArtifactCache",
    "sanitize_svg",
    # Types
    "Artifact",
    "GenerationRequest",
    "GenerationStatus",
    "SubmitOptions",
    # Config
    "GenerationConfig",
    "get_generation_config",
    # Errors
    "GenerationError",
    "RateLimitedError",
    "AuthFailureError",
    "ServiceUnavailableError",
    "GenerationTimeoutError",
    "GenerationFailedError",
    "InvalidRequestError",
]
