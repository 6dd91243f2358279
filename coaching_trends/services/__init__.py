"""
Coaching Trends Services Module

Business logic for turning graded call evaluations into coaching trend
analyses. Pure functions (tiering, sampling, chunking, contributions, coaching
summary) carry no I/O; the stateful pieces take their collaborators through
their constructors so tests can substitute in-memory fakes.

Services:
- tiering: direct / sampled / hierarchical tier selection, weekly grouping
- sampling: time-stratified sampling with a fixed target size
- chunking: weekly chunk partitioning with size bounds
- synthesis_client: HTTP client for the text-generation gateway
- synthesis: typed invoker and failure classification
- hierarchical: map-reduce analysis over weekly chunks
- stores: evaluation / directory / cache storage over asyncpg
- cache: count-validated rep cache and TTL aggregate cache
- contributions: per-rep breakdown for team and organization analyses
- coaching_summary: statistical summary without synthesis
- trends: TrendService orchestrating all of the above
"""

# =============================================================================
# Tiering, Sampling and Chunking
# =============================================================================

from coaching_trends.services.tiering import (
    DIRECT_ANALYSIS_MAX,
    SAMPLING_MAX,
    determine_analysis_tier,
    group_by_week,
    week_start,
)
from coaching_trends.services.sampling import SampleResult, stratified_sample
from coaching_trends.services.chunking import (
    MAX_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    split_into_weekly_chunks,
)

# =============================================================================
# Synthesis
# =============================================================================

from coaching_trends.services.synthesis_client import (
    GatewaySynthesisClient,
    SynthesisHTTPError,
    SynthesisResponseError,
)
from coaching_trends.services.synthesis import (
    SynthesisCollaborator,
    SynthesisInvoker,
    classify_synthesis_error,
)
from coaching_trends.services.hierarchical import (
    BoundedChunkRunner,
    HierarchicalAnalyzer,
    HierarchicalResult,
    SequentialChunkRunner,
)

# =============================================================================
# Storage and Caching
# =============================================================================

from coaching_trends.services.stores import (
    CacheStore,
    EvaluationStore,
    PostgresCacheStore,
    PostgresEvaluationStore,
    PostgresSubjectDirectory,
    SubjectDirectory,
)
from coaching_trends.services.cache import TrendCache, aggregate_cache_key

# =============================================================================
# Statistics and Orchestration
# =============================================================================

from coaching_trends.services.contributions import calculate_rep_contributions
from coaching_trends.services.coaching_summary import build_coaching_summary
from coaching_trends.services.trends import TrendService


__all__ = [
    # Tiering
    'DIRECT_ANALYSIS_MAX',
    'SAMPLING_MAX',
    'determine_analysis_tier',
    'group_by_week',
    'week_start',
    # Sampling
    'SampleResult',
    'stratified_sample',
    # Chunking
    'MIN_CHUNK_SIZE',
    'MAX_CHUNK_SIZE',
    'split_into_weekly_chunks',
    # Synthesis
    'GatewaySynthesisClient',
    'SynthesisHTTPError',
    'SynthesisResponseError',
    'SynthesisCollaborator',
    'SynthesisInvoker',
    'classify_synthesis_error',
    'BoundedChunkRunner',
    'HierarchicalAnalyzer',
    'HierarchicalResult',
    'SequentialChunkRunner',
    # Storage
    'CacheStore',
    'EvaluationStore',
    'SubjectDirectory',
    'PostgresCacheStore',
    'PostgresEvaluationStore',
    'PostgresSubjectDirectory',
    'TrendCache',
    'aggregate_cache_key',
    # Statistics and orchestration
    'calculate_rep_contributions',
    'build_coaching_summary',
    'TrendService',
]
