"""
Contract tests for the coaching trend HTTP endpoints.

The TrendService dependency is overridden, either with a service wired to
in-memory fakes or with an AsyncMock raising a specific error, so these tests
cover routing, request parsing and the error-to-status mapping.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from coaching_trends.core.dependencies import get_trend_service
from coaching_trends.core.errors import (
    ChunkFailureError,
    NoDataError,
    SynthesisGenericError,
    SynthesisQuotaExceededError,
    SynthesisRateLimitedError,
    SynthesisUnavailableError,
)
from coaching_trends.main import app
from coaching_trends.tests.conftest import make_evaluations


@pytest.fixture
def client():
    # Not used as a context manager, so the lifespan (database pool) never runs
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_service():
    def override(service) -> None:
        app.dependency_overrides[get_trend_service] = lambda: service
    return override


def failing_service(error: BaseException) -> MagicMock:
    service = MagicMock()
    service.generate_trend = AsyncMock(side_effect=error)
    service.generate_aggregate_trend = AsyncMock(side_effect=error)
    return service


BODY = {"from": "2025-01-05", "to": "2025-01-31"}


class TestRepTrendEndpoint:

    def test_generates_direct_analysis(self, client, use_service, trend_service, evaluation_store) -> None:
        evaluation_store.evaluations = make_evaluations(12)
        use_service(trend_service)

        response = client.post("/coaching-trends/reps/rep-1", json=BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["metadata"]["tier"] == "direct"
        assert data["metadata"]["totalCalls"] == 12
        assert data["analysis"]["summary"] == "Direct synthesis"
        assert data["analysis"]["trendAnalysis"]["gapSelling"]["trend"] == "stable"

    def test_force_refresh_is_passed_through(self, client, use_service) -> None:
        service = MagicMock()
        service.generate_trend = AsyncMock(side_effect=NoDataError("rep rep-1", "2025-01-05", "2025-01-31"))
        use_service(service)

        client.post("/coaching-trends/reps/rep-1", json={**BODY, "forceRefresh": True})

        assert service.generate_trend.await_args.kwargs["force_refresh"] is True

    def test_no_data_is_404(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.post("/coaching-trends/reps/rep-1", json=BODY)

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["errorType"] == "no_data"
        assert detail["retryable"] is False

    def test_reversed_range_is_400(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.post("/coaching-trends/reps/rep-1", json={"from": "2025-02-01", "to": "2025-01-01"})

        assert response.status_code == 400

    def test_missing_dates_is_422(self, client, use_service, trend_service) -> None:
        use_service(trend_service)
        assert client.post("/coaching-trends/reps/rep-1", json={}).status_code == 422

    def test_rate_limit_is_429_with_retry_after(self, client, use_service) -> None:
        use_service(failing_service(SynthesisRateLimitedError(retry_after_seconds=30)))

        response = client.post("/coaching-trends/reps/rep-1", json=BODY)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.json()["detail"]["retryable"] is True

    @pytest.mark.parametrize("error,status", [
        (SynthesisQuotaExceededError(), 402),
        (SynthesisUnavailableError(), 503),
        (SynthesisGenericError("bad output"), 502),
        (ChunkFailureError(1, 6, SynthesisUnavailableError()), 502),
    ])
    def test_synthesis_errors_map_to_status(self, client, use_service, error, status) -> None:
        use_service(failing_service(error))

        response = client.post("/coaching-trends/reps/rep-1", json=BODY)

        assert response.status_code == status
        assert response.json()["detail"]["errorType"] == error.error_type


class TestAggregateEndpoint:

    def test_team_analysis(self, client, use_service, trend_service, evaluation_store) -> None:
        evaluation_store.evaluations = make_evaluations(6, rep_id="rep-1") + make_evaluations(3, rep_id="rep-2")
        use_service(trend_service)

        response = client.post(
            "/coaching-trends/aggregate",
            json={**BODY, "scope": "team", "teamId": "team-west"},
        )

        assert response.status_code == 200
        metadata = response.json()["metadata"]
        assert metadata["scope"] == "team"
        assert metadata["repsIncluded"] == 2
        assert metadata["cached"] is False
        assert [c["repId"] for c in metadata["repContributions"]] == ["rep-1", "rep-2"]

    def test_team_without_team_id_is_400(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.post("/coaching-trends/aggregate", json={**BODY, "scope": "team"})

        assert response.status_code == 400

    def test_unknown_scope_is_422(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.post("/coaching-trends/aggregate", json={**BODY, "scope": "galaxy"})

        assert response.status_code == 422

    def test_empty_team_is_404(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.post(
            "/coaching-trends/aggregate",
            json={**BODY, "scope": "team", "teamId": "team-nobody"},
        )

        assert response.status_code == 404
        assert response.json()["detail"]["errorType"] == "no_reps"


class TestSummaryAndHistoryEndpoints:

    def test_summary(self, client, use_service, trend_service, evaluation_store) -> None:
        evaluation_store.evaluations = make_evaluations(4)
        use_service(trend_service)

        response = client.get(
            "/coaching-trends/reps/rep-1/summary",
            params={"from": "2025-01-05", "to": "2025-01-31"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totalCalls"] == 4
        assert data["dateRange"] == {"from": "2025-01-05", "to": "2025-01-31"}
        assert data["aggregatedTags"]["skillTags"][0] == {"tag": "discovery", "count": 4}

    def test_summary_reversed_range_is_400(self, client, use_service, trend_service) -> None:
        use_service(trend_service)

        response = client.get(
            "/coaching-trends/reps/rep-1/summary",
            params={"from": "2025-02-05", "to": "2025-01-31"},
        )

        assert response.status_code == 400

    def test_history(self, client, use_service, trend_service, cache_store) -> None:
        use_service(trend_service)

        response = client.get("/coaching-trends/reps/rep-1/history", params={"limit": 5})

        assert response.status_code == 200
        assert response.json() == []
        assert cache_store.history_calls == [("rep-1", 5, False)]

    def test_history_limit_validated(self, client, use_service, trend_service) -> None:
        use_service(trend_service)
        assert client.get("/coaching-trends/reps/rep-1/history", params={"limit": 0}).status_code == 422


class TestServiceEndpoints:

    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client) -> None:
        data = client.get("/").json()
        assert data["name"] == "Coaching Trends API"
        assert data["docs"] == "/docs"


def test_no_data_detail_mentions_range(client, use_service, trend_service) -> None:
    use_service(trend_service)

    response = client.post("/coaching-trends/reps/rep-9", json={"from": "2025-01-01", "to": "2025-01-02"})

    assert "2025-01-01" in response.json()["detail"]["error"]
    assert "2025-01-02" in response.json()["detail"]["error"]
