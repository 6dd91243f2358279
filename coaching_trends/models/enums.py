"""
Enumeration definitions for the Coaching Trends backend.

All enums inherit from both `str` and `Enum` so pydantic models serialize them
as plain strings in API responses and cached JSON payloads.
"""

from enum import Enum


class AnalysisTier(str, Enum):
    """
    Analysis strategy selected from the number of calls in range.

    - direct: every call is sent to a single synthesis pass
    - sampled: a stratified sample is sent to a single synthesis pass
    - hierarchical: calls are chunked, summarized per chunk, then synthesized
    """
    DIRECT = "direct"
    SAMPLED = "sampled"
    HIERARCHICAL = "hierarchical"


class TrendDirection(str, Enum):
    """Direction of a metric over the analyzed period."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class GapTrend(str, Enum):
    """
    Direction of a recurring information gap.

    Gaps get "worse" rather than "declining": a growing gap is bad news,
    whereas a declining score is.
    """
    IMPROVING = "improving"
    STABLE = "stable"
    WORSE = "worse"


class AnalysisScope(str, Enum):
    """Population a trend analysis covers."""
    ORGANIZATION = "organization"
    TEAM = "team"
    REP = "rep"


class SamplingMethod(str, Enum):
    """How a sampled tier selected its calls."""
    STRATIFIED = "stratified"


class QualificationFramework(str, Enum):
    """
    Qualification framework used as a rep's primary framework score.

    MEDDPICC is current; BANT only appears on evaluations graded before the
    switch and is kept so older periods still trend.
    """
    MEDDPICC = "meddpicc"
    BANT = "bant"


class SynthesisErrorKind(str, Enum):
    """Classification of a failed synthesis call."""
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNAVAILABLE = "unavailable"
    GENERIC = "synthesis_failed"
