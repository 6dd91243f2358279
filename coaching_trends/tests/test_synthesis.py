"""
Tests for synthesis failure classification and the typed invoker.

Raw collaborator failures (HTTP statuses, gateway message text, timeouts,
malformed payloads) must come out of the invoker as exactly one
SynthesisError subclass, with the original exception chained as __cause__.
"""

import asyncio
from datetime import date

import httpx
import pytest

from coaching_trends.core.errors import (
    SynthesisError,
    SynthesisGenericError,
    SynthesisQuotaExceededError,
    SynthesisRateLimitedError,
    SynthesisUnavailableError,
)
from coaching_trends.models.schemas import DateRange, TrendAnalysis
from coaching_trends.services.synthesis import (
    DEFAULT_RETRY_AFTER_SECONDS,
    SynthesisInvoker,
    classify_synthesis_error,
)
from coaching_trends.services.synthesis_client import SynthesisHTTPError, SynthesisResponseError
from coaching_trends.tests.conftest import FakeCollaborator, make_record

RANGE = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31))


# =============================================================================
# Classification
# =============================================================================


class TestClassifySynthesisError:

    def test_429_is_rate_limited_with_retry_after(self) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(429, "slow down", retry_after=12))

        assert isinstance(error, SynthesisRateLimitedError)
        assert error.retry_after_seconds == 12
        assert error.retryable is True

    def test_429_without_header_uses_default_delay(self) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(429))
        assert error.retry_after_seconds == DEFAULT_RETRY_AFTER_SECONDS

    def test_402_is_quota_exceeded(self) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(402, "Payment required"))

        assert isinstance(error, SynthesisQuotaExceededError)
        assert error.retryable is False

    def test_503_is_unavailable(self) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(503))

        assert isinstance(error, SynthesisUnavailableError)
        assert error.retryable is True

    @pytest.mark.parametrize("status,body", [
        (502, "Bad Gateway"),
        (503, ""),
        (504, "Gateway Timeout"),
    ])
    def test_gateway_outage_statuses_are_unavailable(self, status: int, body: str) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(status, body))

        assert isinstance(error, SynthesisUnavailableError)
        assert error.retryable is True

    @pytest.mark.parametrize("body,expected", [
        ("model temporarily unavailable", SynthesisUnavailableError),
        ("rate exceeded, slow down", SynthesisRateLimitedError),
        ("upstream said 429", SynthesisRateLimitedError),
        ("failed to generate an accurate answer", SynthesisGenericError),
    ])
    def test_http_body_uses_same_text_rules_as_plain_errors(self, body: str, expected: type) -> None:
        """A body is classified exactly as the same text raised without a status."""
        from_http = classify_synthesis_error(SynthesisHTTPError(500, body))
        from_text = classify_synthesis_error(RuntimeError(body))

        assert isinstance(from_http, expected)
        assert type(from_http) is type(from_text)

    @pytest.mark.parametrize("exc", [
        httpx.ConnectError("All connection attempts failed"),
        httpx.RemoteProtocolError("Server disconnected without sending a response"),
        httpx.ReadError(""),
    ])
    def test_connection_failures_are_unavailable(self, exc: BaseException) -> None:
        error = classify_synthesis_error(exc)

        assert isinstance(error, SynthesisUnavailableError)
        assert error.retryable is True

    def test_other_status_classified_by_body(self) -> None:
        assert isinstance(
            classify_synthesis_error(SynthesisHTTPError(400, "Rate limit exceeded for org")),
            SynthesisRateLimitedError,
        )
        assert isinstance(
            classify_synthesis_error(SynthesisHTTPError(400, "Not enough credits")),
            SynthesisQuotaExceededError,
        )

    def test_other_status_is_generic(self) -> None:
        error = classify_synthesis_error(SynthesisHTTPError(500, "boom"))

        assert isinstance(error, SynthesisGenericError)
        assert "500" in error.message

    @pytest.mark.parametrize("exc", [
        httpx.ReadTimeout("read timed out"),
        httpx.ConnectTimeout("connect timed out"),
        asyncio.TimeoutError(),
    ])
    def test_timeouts_are_unavailable(self, exc: BaseException) -> None:
        assert isinstance(classify_synthesis_error(exc), SynthesisUnavailableError)

    def test_malformed_response_is_generic(self) -> None:
        error = classify_synthesis_error(SynthesisResponseError("AI did not return expected structured output"))

        assert isinstance(error, SynthesisGenericError)
        assert "structured output" in error.message

    @pytest.mark.parametrize("text,expected", [
        ("upstream returned 429", SynthesisRateLimitedError),
        ("rate limit hit", SynthesisRateLimitedError),
        ("monthly quota exhausted", SynthesisQuotaExceededError),
        ("402 payment required", SynthesisQuotaExceededError),
        ("service unavailable", SynthesisUnavailableError),
        ("failed to generate an accurate answer", SynthesisGenericError),
    ])
    def test_message_text_fallback(self, text: str, expected: type) -> None:
        assert isinstance(classify_synthesis_error(RuntimeError(text)), expected)

    def test_already_classified_error_passes_through(self) -> None:
        original = SynthesisQuotaExceededError("out of credits")
        assert classify_synthesis_error(original) is original


# =============================================================================
# Invoker
# =============================================================================


class TestSynthesisInvoker:

    @pytest.mark.asyncio
    async def test_returns_collaborator_result(self) -> None:
        invoker = SynthesisInvoker(FakeCollaborator())
        analysis = await invoker.synthesize([make_record(date(2025, 1, 2))], RANGE)

        assert isinstance(analysis, TrendAnalysis)
        assert analysis.summary == "Direct synthesis"

    @pytest.mark.asyncio
    async def test_http_error_is_classified_and_chained(self) -> None:
        collaborator = FakeCollaborator()
        raw = SynthesisHTTPError(429, "Too Many Requests", retry_after=5)
        collaborator.synthesize_error = raw

        with pytest.raises(SynthesisRateLimitedError) as exc_info:
            await SynthesisInvoker(collaborator).synthesize([make_record(date(2025, 1, 2))], RANGE)

        assert exc_info.value.retry_after_seconds == 5
        assert exc_info.value.__cause__ is raw

    @pytest.mark.asyncio
    async def test_classified_error_is_reraised_unchanged(self) -> None:
        collaborator = FakeCollaborator()
        original = SynthesisUnavailableError("down")
        collaborator.reduce_error = original

        with pytest.raises(SynthesisUnavailableError) as exc_info:
            await SynthesisInvoker(collaborator).synthesize_from_summaries([], RANGE, 0)

        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_chunk_failure_is_classified(self) -> None:
        collaborator = FakeCollaborator()
        collaborator.chunk_errors[0] = SynthesisHTTPError(402, "quota")

        with pytest.raises(SynthesisQuotaExceededError):
            await SynthesisInvoker(collaborator).summarize_chunk([make_record(date(2025, 1, 2))], 0, RANGE)

    @pytest.mark.asyncio
    async def test_none_result_is_generic_failure(self) -> None:
        class EmptyCollaborator(FakeCollaborator):
            async def synthesize(self, records, date_range):
                return None

        with pytest.raises(SynthesisGenericError):
            await SynthesisInvoker(EmptyCollaborator()).synthesize([], RANGE)

    @pytest.mark.asyncio
    async def test_error_payload_is_classified(self) -> None:
        class ErrorPayloadCollaborator(FakeCollaborator):
            async def synthesize(self, records, date_range):
                return {"error": "AI Gateway error: 429"}

        with pytest.raises(SynthesisRateLimitedError):
            await SynthesisInvoker(ErrorPayloadCollaborator()).synthesize([], RANGE)

    @pytest.mark.asyncio
    async def test_dict_result_is_validated(self) -> None:
        class DictCollaborator(FakeCollaborator):
            async def synthesize(self, records, date_range):
                return {"summary": "From a dict", "periodAnalysis": {"totalCalls": 3}}

        analysis = await SynthesisInvoker(DictCollaborator()).synthesize([], RANGE)

        assert analysis.summary == "From a dict"
        assert analysis.periodAnalysis.totalCalls == 3

    @pytest.mark.asyncio
    async def test_invalid_enum_value_is_generic_failure(self) -> None:
        class BadEnumCollaborator(FakeCollaborator):
            async def synthesize(self, records, date_range):
                return {"periodAnalysis": {"heatScoreTrend": "sideways"}}

        with pytest.raises(SynthesisGenericError):
            await SynthesisInvoker(BadEnumCollaborator()).synthesize([], RANGE)

    @pytest.mark.asyncio
    async def test_every_failure_is_a_synthesis_error(self) -> None:
        collaborator = FakeCollaborator()
        collaborator.synthesize_error = KeyError("choices")

        with pytest.raises(SynthesisError):
            await SynthesisInvoker(collaborator).synthesize([], RANGE)
