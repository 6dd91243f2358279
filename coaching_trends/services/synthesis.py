"""
Synthesis invoker: the typed boundary around the text-generation collaborator.

Whatever the collaborator raises (HTTP status errors, malformed tool output,
timeouts, plain exceptions carrying gateway text) is translated here, once,
into the error taxonomy of core/errors.py:

    429 / "rate"                      -> SynthesisRateLimitedError   (retryable)
    402 / "quota" / "credits"         -> SynthesisQuotaExceededError
    502-504 / "unavailable"           -> SynthesisUnavailableError   (retryable)
    timeouts / connection failures    -> SynthesisUnavailableError   (retryable)
    empty or malformed response       -> SynthesisGenericError
    anything else                     -> SynthesisGenericError

The invoker never retries. Retry policy belongs to whoever calls the trend
service.
"""

import asyncio
import logging
import re
from typing import Any, List, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from coaching_trends.core.errors import (
    SynthesisError,
    SynthesisGenericError,
    SynthesisQuotaExceededError,
    SynthesisRateLimitedError,
    SynthesisUnavailableError,
)
from coaching_trends.models.schemas import (
    ChunkSummary,
    DateRange,
    FormattedRecord,
    TrendAnalysis,
)
from coaching_trends.services.synthesis_client import SynthesisHTTPError, SynthesisResponseError

logger = logging.getLogger(__name__)

# Used when a 429 carries no Retry-After header
DEFAULT_RETRY_AFTER_SECONDS: int = 60

# "rate" as a word, so "generate" or "accurate" do not count
_RATE_PATTERN = re.compile(r"\brate\b|rate[- ]limit")

# Gateway and upstream outages; retrying later is expected to succeed
UNAVAILABLE_STATUS_CODES = frozenset({502, 503, 504})


class SynthesisCollaborator(Protocol):
    """The external service that writes trend narratives."""

    async def synthesize(
        self, records: List[FormattedRecord], date_range: DateRange
    ) -> TrendAnalysis: ...

    async def summarize_chunk(
        self, records: List[FormattedRecord], chunk_index: int, date_range: DateRange
    ) -> ChunkSummary: ...

    async def synthesize_from_summaries(
        self, summaries: List[ChunkSummary], date_range: DateRange, total_calls: int
    ) -> TrendAnalysis: ...


# =============================================================================
# Error Classification
# =============================================================================


def _classify_text(text: str) -> SynthesisError:
    lowered = text.lower()
    if "429" in lowered or _RATE_PATTERN.search(lowered):
        return SynthesisRateLimitedError(detail=text, retry_after_seconds=DEFAULT_RETRY_AFTER_SECONDS)
    if "402" in lowered or "quota" in lowered or "credits" in lowered:
        return SynthesisQuotaExceededError(detail=text)
    if "503" in lowered or "unavailable" in lowered:
        return SynthesisUnavailableError(detail=text)
    return SynthesisGenericError(text or "Unknown error from AI")


def classify_synthesis_error(exc: BaseException) -> SynthesisError:
    """
    Map any collaborator failure onto the synthesis error taxonomy.

    Args:
        exc: The exception raised by the collaborator.

    Returns:
        A SynthesisError subclass instance. Already-classified errors are
        returned unchanged.

    Example:
        >>> classify_synthesis_error(SynthesisHTTPError(429)).error_type
        'rate_limited'
    """
    if isinstance(exc, SynthesisError):
        return exc

    if isinstance(exc, SynthesisHTTPError):
        if exc.status_code == 429:
            return SynthesisRateLimitedError(
                detail=exc.body,
                retry_after_seconds=exc.retry_after or DEFAULT_RETRY_AFTER_SECONDS,
            )
        if exc.status_code == 402:
            return SynthesisQuotaExceededError(detail=exc.body)
        if exc.status_code in UNAVAILABLE_STATUS_CODES:
            return SynthesisUnavailableError(detail=exc.body)

        classified = _classify_text(exc.body)
        if isinstance(classified, SynthesisGenericError):
            return SynthesisGenericError(str(exc))
        return classified

    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return SynthesisUnavailableError(detail="AI analysis timed out")

    if isinstance(exc, httpx.TransportError):
        return SynthesisUnavailableError(detail=str(exc) or type(exc).__name__)

    if isinstance(exc, (SynthesisResponseError, ValidationError)):
        return SynthesisGenericError(str(exc) or "Malformed response from AI")

    return _classify_text(str(exc))


def _require(result: Any, model: type, operation: str) -> Any:
    # Collaborators may hand back nothing, a raw dict, or an error payload
    if result is None:
        raise SynthesisGenericError("Unknown error from AI")
    if isinstance(result, model):
        return result
    if isinstance(result, dict):
        if result.get("error"):
            raise _classify_text(str(result["error"]))
        return model.model_validate(result)
    if isinstance(result, BaseModel):
        return model.model_validate(result.model_dump())
    raise SynthesisGenericError(f"Unexpected {operation} result of type {type(result).__name__}")


# =============================================================================
# Invoker
# =============================================================================


class SynthesisInvoker:
    """
    Calls the synthesis collaborator and normalizes its failures.

    Every public method either returns a validated model or raises a
    SynthesisError subclass.
    """

    def __init__(self, collaborator: SynthesisCollaborator):
        self.collaborator = collaborator

    async def synthesize(self, records: List[FormattedRecord], date_range: DateRange) -> TrendAnalysis:
        try:
            result = await self.collaborator.synthesize(records, date_range)
            return _require(result, TrendAnalysis, "synthesize")
        except Exception as e:
            error = classify_synthesis_error(e)
            logger.error("Trend synthesis over %d calls failed (%s): %s",
                         len(records), error.error_type, e)
            if error is e:
                raise
            raise error from e

    async def summarize_chunk(
        self,
        records: List[FormattedRecord],
        chunk_index: int,
        date_range: DateRange,
    ) -> ChunkSummary:
        try:
            result = await self.collaborator.summarize_chunk(records, chunk_index, date_range)
            return _require(result, ChunkSummary, "summarize_chunk")
        except Exception as e:
            error = classify_synthesis_error(e)
            logger.error("Chunk %d summary failed (%s): %s", chunk_index, error.error_type, e)
            if error is e:
                raise
            raise error from e

    async def synthesize_from_summaries(
        self,
        summaries: List[ChunkSummary],
        date_range: DateRange,
        total_calls: int,
    ) -> TrendAnalysis:
        try:
            result = await self.collaborator.synthesize_from_summaries(summaries, date_range, total_calls)
            return _require(result, TrendAnalysis, "synthesize_from_summaries")
        except Exception as e:
            error = classify_synthesis_error(e)
            logger.error("Synthesis of %d chunk summaries failed (%s): %s",
                         len(summaries), error.error_type, e)
            if error is e:
                raise
            raise error from e
