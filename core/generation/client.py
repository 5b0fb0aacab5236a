"""Async client for the external diagram generation service.

The service is asynchronous: a submit returns a request id, the request moves
through pending -> processing -> completed|failed, and completed requests list
artifact URLs that are downloaded with the same bearer token.

Example:
    async with GenerationClient() as client:
        request_id = await client.submit("The pipeline has three stages...")
        request = await client.poll(request_id)
        svg = await client.fetch(request.artifact_refs[0])
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from core.utils import BaseAsyncHttpClient, safe_http_request

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
from .types import GenerationRequest, GenerationStatus, SubmitOptions

logger = logging.getLogger(__name__)

# Field names the service has used for the submit response id
_REQUEST_ID_FIELDS = ("request_id", "requestId", "id")


class GenerationClient(BaseAsyncHttpClient):
    """
    Async client for the diagram generation API.

    Uses httpx for async HTTP with adaptive polling for long-running requests.
    Status codes are mapped to the GenerationError hierarchy:
    429 -> RateLimitedError, 401/402/403 -> AuthFailureError,
    5xx -> ServiceUnavailableError, other 4xx -> InvalidRequestError.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_generation_config()
        headers = {}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        super().__init__(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=headers,
            transport=transport,
        )

    def _require_token(self) -> None:
        if not self.config.is_configured:
            raise AuthFailureError("DIAGRAM_API_TOKEN not configured")

    def _raise_for_status(
        self, response: httpx.Response, request_id: str | None = None
    ) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 429:
            retry_after = _parse_retry_after(
                response.headers.get("Retry-After"), self.config.default_retry_after
            )
            raise RateLimitedError(retry_after=retry_after, request_id=request_id)
        if status in (401, 403):
            raise AuthFailureError(
                f"Diagram service authentication failed ({status})", request_id
            )
        if status == 402:
            raise AuthFailureError(
                "Diagram service reports insufficient credits (402)", request_id
            )
        if status >= 500:
            raise ServiceUnavailableError(
                f"Diagram service error: {status}", request_id
            )
        raise InvalidRequestError(
            f"Diagram service rejected request: {status} - {response.text[:200]}",
            request_id,
        )

    async def submit(self, text: str, options: Optional[SubmitOptions] = None) -> str:
        """
        Submit text for diagram generation.

        Args:
            text: Content to visualize (truncated to config.max_chars)
            options: Optional style, language and surrounding context

        Returns:
            Request ID for polling status

        Raises:
            InvalidRequestError: If text is empty
            GenerationError: Mapped from the service's HTTP status
        """
        self._require_token()

        content = text[: self.config.max_chars].strip()
        if not content:
            raise InvalidRequestError("Content text cannot be empty")

        options = options or SubmitOptions()
        payload: dict[str, Any] = {
            "content": content,
            "format": self.config.output_format,
        }
        if options.style_id:
            payload["style_id"] = options.style_id
        language = options.language or self.config.language
        if language:
            payload["language"] = language
        if options.context_before and options.context_before.strip():
            payload["context_before"] = options.context_before.strip()
        if options.context_after and options.context_after.strip():
            payload["context_after"] = options.context_after.strip()

        client = await self._get_client()
        response = await safe_http_request(
            client, "POST", "/visual", ServiceUnavailableError, json=payload
        )
        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(
                f"Invalid JSON from diagram service: {response.text[:100]}"
            ) from e
        if not isinstance(data, dict):
            raise GenerationError(f"Unexpected diagram service response: {data}")

        request_id = next(
            (data[key] for key in _REQUEST_ID_FIELDS if data.get(key)), None
        )
        if not request_id:
            raise GenerationError(f"No request_id in diagram service response: {data}")

        logger.info(f"Submitted diagram request {request_id} ({len(content)} chars)")
        return str(request_id)

    async def get_status(self, request_id: str) -> GenerationRequest:
        """Get the current status of a request without waiting."""
        self._require_token()
        client = await self._get_client()
        response = await safe_http_request(
            client,
            "GET",
            f"/visual/{request_id}/status",
            ServiceUnavailableError,
        )
        self._raise_for_status(response, request_id)

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceUnavailableError(
                f"Invalid JSON status for {request_id}: {response.text[:100]}",
                request_id,
            ) from e

        if not isinstance(data, dict):
            raise ServiceUnavailableError(
                f"Malformed status payload for {request_id}: {str(data)[:100]}",
                request_id,
            )
        files = data.get("generated_files") or []
        if not isinstance(files, list) or not all(isinstance(f, dict) for f in files):
            raise ServiceUnavailableError(
                f"Malformed generated_files for {request_id}: {str(files)[:100]}",
                request_id,
            )

        try:
            status = GenerationStatus(data.get("status"))
        except ValueError:
            logger.warning(f"Unknown status for {request_id}: {data.get('status')}")
            status = GenerationStatus.PROCESSING

        return GenerationRequest(
            request_id=request_id,
            status=status,
            artifact_refs=[str(f["url"]) for f in files if f.get("url")],
        )

    async def poll(self, request_id: str) -> GenerationRequest:
        """
        Poll a request until it completes, with adaptive backoff.

        The interval starts at poll_initial_interval and is multiplied by
        poll_backoff after every non-terminal poll, capped at poll_max_interval.
        Transient errors (5xx, transport, rate limits) are retried within the
        same absolute timeout.

        Returns:
            The completed GenerationRequest

        Raises:
            GenerationTimeoutError: If not terminal within poll_timeout
            GenerationFailedError: If the service reports failure
            AuthFailureError: If credentials are rejected mid-poll
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        interval = self.config.poll_initial_interval
        attempt = 0

        while True:
            elapsed = loop.time() - start_time
            if elapsed >= self.config.poll_timeout:
                raise GenerationTimeoutError(
                    f"Request {request_id} did not complete within "
                    f"{self.config.poll_timeout}s",
                    request_id,
                )

            attempt += 1
            try:
                request = await self.get_status(request_id)
            except (ServiceUnavailableError, RateLimitedError) as e:
                logger.warning(f"Poll {attempt} for {request_id} failed: {e}")
            else:
                if request.is_terminal:
                    if request.status == GenerationStatus.FAILED:
                        raise GenerationFailedError(
                            f"Diagram generation failed for {request_id}", request_id
                        )
                    logger.info(
                        f"Request {request_id} completed after {elapsed:.1f}s "
                        f"({attempt} polls)"
                    )
                    return request

            remaining = self.config.poll_timeout - (loop.time() - start_time)
            await asyncio.sleep(max(0.0, min(interval, remaining)))
            interval = min(interval * self.config.poll_backoff, self.config.poll_max_interval)

    async def fetch(self, artifact_ref: str) -> str:
        """
        Download an artifact and strip executable content from it.

        Args:
            artifact_ref: Artifact URL from a completed request

        Returns:
            Sanitized artifact markup

        Raises:
            GenerationFailedError: If the artifact is not well-formed SVG
        """
        self._require_token()
        client = await self._get_client()
        response = await safe_http_request(
            client, "GET", artifact_ref, ServiceUnavailableError
        )
        self._raise_for_status(response)
        return sanitize_svg(response.text)


def _parse_retry_after(value: str | None, default: float) -> float:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return default
    try:
        return max(0.0, float(value))
    except ValueError:
        return default
