"""Exception classes for judgment calls."""


class JudgmentError(Exception):
    """The language model could not be reached or returned nothing."""

    def __init__(self, message: str, stage: str | None = None):
        self.message = message
        self.stage = stage
        super().__init__(message)


class MalformedJudgmentError(JudgmentError):
    """Judgment output failed structural validation.

    Callers treat this as a signal to take their deterministic fallback path,
    never as a reason to abort.
    """

    def __init__(self, message: str, raw: str = "", stage: str | None = None):
        self.raw = raw
        super().__init__(message, stage=stage)
