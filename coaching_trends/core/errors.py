"""
Error taxonomy for trend generation.

Every failure that can reach a caller of the trend service is one of the
classes below. Raw collaborator errors (HTTP status codes, gateway message
text) are translated into this taxonomy inside the synthesis invoker, so no
downstream code inspects error strings.

    TrendAnalysisError
    ├── NoDataError                   zero evaluations in range, not retryable
    ├── NoRepsFoundError              scope resolved to no reps, not retryable
    ├── ChunkFailureError             map stage failed on one chunk
    └── SynthesisError
        ├── SynthesisRateLimitedError     retry after a short delay
        ├── SynthesisQuotaExceededError   operator action required
        ├── SynthesisUnavailableError     transient, retry later
        └── SynthesisGenericError         malformed response or anything else
"""

from typing import Optional

from coaching_trends.models.enums import SynthesisErrorKind


class TrendAnalysisError(Exception):
    """Base exception for trend analysis errors."""

    def __init__(self, message: str, error_type: str, retryable: bool = False):
        self.message = message
        self.error_type = error_type
        self.retryable = retryable
        super().__init__(message)


class NoDataError(TrendAnalysisError):
    """Raised when no evaluations exist for the requested subject and range."""

    def __init__(self, subject: str, date_from: str, date_to: str):
        self.subject = subject
        self.date_from = date_from
        self.date_to = date_to
        message = (
            f"No analyzed calls found for {subject} between {date_from} and {date_to}"
        )
        super().__init__(message, "no_data", retryable=False)


class NoRepsFoundError(TrendAnalysisError):
    """Raised when a team or organization scope resolves to no reps."""

    def __init__(self, scope: str, team_id: Optional[str] = None):
        self.scope = scope
        self.team_id = team_id
        target = f"team '{team_id}'" if team_id else scope
        message = f"No reps found for the selected scope ({target})"
        super().__init__(message, "no_reps", retryable=False)


class SynthesisError(TrendAnalysisError):
    """Base class for failures of the external synthesis collaborator."""


class SynthesisRateLimitedError(SynthesisError):
    """The synthesis service is throttling requests."""

    def __init__(self, detail: str = "", retry_after_seconds: int = 60):
        self.detail = detail
        self.retry_after_seconds = retry_after_seconds
        message = "AI service is temporarily busy. Please wait a moment and try again."
        super().__init__(message, SynthesisErrorKind.RATE_LIMITED.value, retryable=True)


class SynthesisQuotaExceededError(SynthesisError):
    """The synthesis account has run out of credits or quota."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = "AI usage quota exceeded. Please contact support or try again later."
        super().__init__(message, SynthesisErrorKind.QUOTA_EXCEEDED.value, retryable=False)


class SynthesisUnavailableError(SynthesisError):
    """The synthesis service is down or timed out."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = "AI service is temporarily unavailable. Please try again in a few minutes."
        super().__init__(message, SynthesisErrorKind.UNAVAILABLE.value, retryable=True)


class SynthesisGenericError(SynthesisError):
    """Any other synthesis failure, including empty or malformed responses."""

    def __init__(self, detail: str):
        self.detail = detail
        message = f"AI trend analysis failed: {detail}"
        super().__init__(message, SynthesisErrorKind.GENERIC.value, retryable=False)


class ChunkFailureError(TrendAnalysisError):
    """
    Raised when the map stage of a hierarchical run fails on one chunk.

    The whole run is aborted; ``cause`` holds the classified synthesis error
    so callers can still honor its retry semantics.
    """

    def __init__(self, chunk_index: int, total_chunks: int, cause: SynthesisError):
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        self.cause = cause
        message = (
            f"Failed to analyze chunk {chunk_index + 1} of {total_chunks}: {cause.message}"
        )
        super().__init__(message, "chunk_failed", retryable=cause.retryable)
