"""
FastAPI dependency injection module for the Coaching Trends backend.

Endpoints receive their collaborators through the dependencies below rather
than building them, so tests can swap any of them out:

    app.dependency_overrides[get_trend_service] = lambda: service_with_fakes

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_trend_service: TrendService wired to Postgres stores and the gateway
- SettingsDep / TrendServiceDep: Annotated aliases for endpoint signatures

Usage Examples:
    @router.post("/reps/{rep_id}")
    async def generate(rep_id: str, body: TrendRequest, service: TrendServiceDep):
        return await service.generate_trend(rep_id, body.date_range())
"""

from datetime import timedelta
from typing import Annotated

from fastapi import Depends

from coaching_trends.core.config import Settings, get_settings
from coaching_trends.services.cache import TrendCache
from coaching_trends.services.stores import (
    PostgresCacheStore,
    PostgresEvaluationStore,
    PostgresSubjectDirectory,
)
from coaching_trends.services.synthesis import SynthesisInvoker
from coaching_trends.services.synthesis_client import GatewaySynthesisClient
from coaching_trends.services.trends import TrendService


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so FastAPI's dependency override
    mechanism can replace it in tests:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Trend Service Dependency
# =============================================================================

def get_trend_service(settings: SettingsDep) -> TrendService:
    """
    Build a TrendService over the shared asyncpg pool and the synthesis gateway.

    The stores resolve the pool lazily on first query, so construction does
    no I/O.
    """
    cache = TrendCache(
        PostgresCacheStore(),
        aggregate_ttl=timedelta(minutes=settings.aggregate_cache_ttl_minutes),
    )
    invoker = SynthesisInvoker(GatewaySynthesisClient(settings))
    return TrendService(
        evaluations=PostgresEvaluationStore(),
        directory=PostgresSubjectDirectory(),
        cache=cache,
        invoker=invoker,
        settings=settings,
    )


TrendServiceDep = Annotated[TrendService, Depends(get_trend_service)]
