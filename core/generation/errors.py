"""Exception classes for the diagram generation service."""


class GenerationError(Exception):
    """Base generation service exception."""

    def __init__(self, message: str, request_id: str | None = None):
        self.message = message
        self.request_id = request_id
        super().__init__(message)


class RateLimitedError(GenerationError):
    """Service rate limit hit. Retryable after retry_after seconds."""

    def __init__(
        self,
        message: str = "Diagram service rate limit exceeded",
        retry_after: float | None = None,
        request_id: str | None = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, request_id=request_id)


class AuthFailureError(GenerationError):
    """Credentials rejected or account unusable. Fatal to the whole run."""

    pass


class ServiceUnavailableError(GenerationError):
    """Server-side (5xx) or transport failure."""

    pass


class GenerationTimeoutError(GenerationError):
    """Request did not reach a terminal status within the poll timeout."""

    pass


class GenerationFailedError(GenerationError):
    """Request reached the failed status or produced no artifact."""

    pass


class InvalidRequestError(GenerationError):
    """Request rejected as malformed (empty content, other 4xx)."""

    pass
