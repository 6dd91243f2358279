"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- The trend analysis error hierarchy

FastAPI dependencies live in coaching_trends.core.dependencies and are not
re-exported here, since they pull in the service layer.

Usage Examples:
    from coaching_trends.core import get_settings, init_db, close_db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        yield
        await close_db()
"""

# =============================================================================
# Re-exports from coaching_trends.core.config
# =============================================================================
from coaching_trends.core.config import Settings, get_settings

# =============================================================================
# Re-exports from coaching_trends.core.database
# =============================================================================
from coaching_trends.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from coaching_trends.core.errors
# =============================================================================
from coaching_trends.core.errors import (
    ChunkFailureError,
    NoDataError,
    NoRepsFoundError,
    SynthesisError,
    SynthesisGenericError,
    SynthesisQuotaExceededError,
    SynthesisRateLimitedError,
    SynthesisUnavailableError,
    TrendAnalysisError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Errors (from errors.py)
    'TrendAnalysisError',
    'NoDataError',
    'NoRepsFoundError',
    'SynthesisError',
    'SynthesisRateLimitedError',
    'SynthesisQuotaExceededError',
    'SynthesisUnavailableError',
    'SynthesisGenericError',
    'ChunkFailureError',
]
