"""
Package initialization file for coaching trends models.

Re-exports the enumerations and Pydantic schemas so other modules can import
them from coaching_trends.models directly.

Usage:
    from coaching_trends.models import (
        AnalysisTier,
        CallEvaluation,
        FormattedRecord,
        TrendAnalysis,
        AnalysisMetadata,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from coaching_trends.models.enums import (
    AnalysisTier,
    TrendDirection,
    GapTrend,
    AnalysisScope,
    SamplingMethod,
    QualificationFramework,
    SynthesisErrorKind,
)

# =============================================================================
# Schemas
# =============================================================================

from coaching_trends.models.schemas import (
    # Framework scores
    FrameworkScore,
    MeddpiccScore,
    PrimaryFrameworkScore,
    FrameworkScores,
    FRAMEWORK_KEYS,
    CriticalInfoItem,
    FollowUpQuestion,
    # Analysis 2.0 blocks
    PatienceMetric,
    QuestionQualityMetric,
    MonologueMetric,
    TalkListenMetric,
    NextStepsMetric,
    ScoreOnly,
    BehaviorMetrics,
    BehaviorAnalysis,
    RelevanceMapping,
    StrategicThreading,
    MeddpiccElement,
    StrategyMeddpicc,
    StrategyAudit,
    # Evaluation records
    GradedCall,
    CallEvaluation,
    FormattedRecord,
    DateRange,
    # Chunk summary
    ChunkAverageScores,
    ChunkDominantTrends,
    ChunkSummary,
    # Trend analysis
    FrameworkTrend,
    PatienceTrend,
    StrategicThreadingTrend,
    MonologueTrend,
    FrameworkTrends,
    PeriodAnalysis,
    PersistentGap,
    CriticalInfoPattern,
    FollowUpPattern,
    PatternAnalysis,
    PriorityItem,
    TrendAnalysis,
    # Metadata
    SamplingInfo,
    HierarchicalInfo,
    AnalysisMetadata,
    RepFrameworkScores,
    RepContribution,
    AggregateAnalysisMetadata,
    TrendResult,
    AggregateTrendResult,
    # Directory and cache
    RepProfile,
    Team,
    CacheEntry,
    TrendHistoryItem,
    # Requests
    TrendRequest,
    AggregateTrendRequest,
    # Coaching summary
    FrameworkTrendPoint,
    ItemCount,
    TagCount,
    RecurringPatterns,
    AggregatedTags,
    HeatScorePoint,
    HeatScoreStats,
    CoachingSummary,
)

__all__ = [
    # Enums
    "AnalysisTier",
    "TrendDirection",
    "GapTrend",
    "AnalysisScope",
    "SamplingMethod",
    "QualificationFramework",
    "SynthesisErrorKind",
    # Framework scores
    "FrameworkScore",
    "MeddpiccScore",
    "PrimaryFrameworkScore",
    "FrameworkScores",
    "FRAMEWORK_KEYS",
    "CriticalInfoItem",
    "FollowUpQuestion",
    # Analysis 2.0 blocks
    "PatienceMetric",
    "QuestionQualityMetric",
    "MonologueMetric",
    "TalkListenMetric",
    "NextStepsMetric",
    "ScoreOnly",
    "BehaviorMetrics",
    "BehaviorAnalysis",
    "RelevanceMapping",
    "StrategicThreading",
    "MeddpiccElement",
    "StrategyMeddpicc",
    "StrategyAudit",
    # Evaluation records
    "GradedCall",
    "CallEvaluation",
    "FormattedRecord",
    "DateRange",
    # Chunk summary
    "ChunkAverageScores",
    "ChunkDominantTrends",
    "ChunkSummary",
    # Trend analysis
    "FrameworkTrend",
    "PatienceTrend",
    "StrategicThreadingTrend",
    "MonologueTrend",
    "FrameworkTrends",
    "PeriodAnalysis",
    "PersistentGap",
    "CriticalInfoPattern",
    "FollowUpPattern",
    "PatternAnalysis",
    "PriorityItem",
    "TrendAnalysis",
    # Metadata
    "SamplingInfo",
    "HierarchicalInfo",
    "AnalysisMetadata",
    "RepFrameworkScores",
    "RepContribution",
    "AggregateAnalysisMetadata",
    "TrendResult",
    "AggregateTrendResult",
    # Directory and cache
    "RepProfile",
    "Team",
    "CacheEntry",
    "TrendHistoryItem",
    # Requests
    "TrendRequest",
    "AggregateTrendRequest",
    # Coaching summary
    "FrameworkTrendPoint",
    "ItemCount",
    "TagCount",
    "RecurringPatterns",
    "AggregatedTags",
    "HeatScorePoint",
    "HeatScoreStats",
    "CoachingSummary",
]
