"""
Pydantic models for the Coaching Trends backend.

This module covers three layers of data:

1. Upstream evaluation records (snake_case, mirrors the ai_call_analysis rows):
   CallEvaluation with its legacy framework scores and Analysis 2.0
   behavior and strategy blocks, plus FormattedRecord, the projection sent
   to the synthesis service.
2. Synthesis results (camelCase, mirrors the JSON produced by the synthesis
   tool schemas and returned by the API): ChunkSummary and TrendAnalysis.
   Every nested object has a default so a partial response still yields a
   complete TrendAnalysis.
3. Run metadata and API contracts: AnalysisMetadata, RepContribution,
   AggregateAnalysisMetadata, CacheEntry, request bodies, CoachingSummary
   and TrendHistoryItem.

All models use Pydantic v2 syntax.
"""

from datetime import datetime, date as DateType
from typing import Dict, List, Optional, Any, Union

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from coaching_trends.models.enums import (
    AnalysisTier,
    AnalysisScope,
    GapTrend,
    QualificationFramework,
    SamplingMethod,
    TrendDirection,
)


# =============================================================================
# Framework Score Blocks
# =============================================================================


class FrameworkScore(BaseModel):
    """A 0-100 score against one sales framework with its justification."""
    score: float = Field(..., ge=0.0, le=100.0)
    summary: str = ""


class MeddpiccScore(BaseModel):
    """MEDDPICC result; graded with an overall score instead of a plain score."""
    overall_score: float = Field(..., ge=0.0, le=100.0)
    summary: str = ""


class PrimaryFrameworkScore(BaseModel):
    """Resolved primary qualification framework for one evaluation."""
    framework: QualificationFramework
    score: float
    summary: str = ""


class FrameworkScores(BaseModel):
    """
    Framework scores attached to a graded call.

    Evaluations graded before the switch to MEDDPICC carry a BANT block
    instead. Use primary_framework() rather than inspecting either field.
    """
    meddpicc: Optional[MeddpiccScore] = None
    bant: Optional[FrameworkScore] = None
    gap_selling: Optional[FrameworkScore] = None
    active_listening: Optional[FrameworkScore] = None

    def primary_framework(self) -> Optional[PrimaryFrameworkScore]:
        """MEDDPICC when graded, else legacy BANT, else None."""
        if self.meddpicc is not None:
            return PrimaryFrameworkScore(
                framework=QualificationFramework.MEDDPICC,
                score=self.meddpicc.overall_score,
                summary=self.meddpicc.summary,
            )
        if self.bant is not None:
            return PrimaryFrameworkScore(
                framework=QualificationFramework.BANT,
                score=self.bant.score,
                summary=self.bant.summary,
            )
        return None

    def score_for(self, framework: str) -> Optional[float]:
        """
        Score of one framework by key, or None if it was not graded.

        Keys: meddpicc, bant, gap_selling, active_listening.
        """
        if framework == "meddpicc":
            return self.meddpicc.overall_score if self.meddpicc else None
        block = getattr(self, framework, None)
        return block.score if block is not None else None


# Keys of FrameworkScores, in the order they appear in averages and prompts
FRAMEWORK_KEYS: List[str] = ["meddpicc", "bant", "gap_selling", "active_listening"]


# =============================================================================
# Analysis 2.0 Blocks (behavior and strategy audits)
# =============================================================================
#
# Current grading writes these two blocks; framework_scores is only present
# on calls graded before them. Every field is optional because older rows
# carry partial metrics.


class PatienceMetric(BaseModel):
    """Acknowledgment discipline, scored 0-30."""
    score: Optional[float] = None
    missed_acknowledgment_count: int = 0
    status: str = ""


class QuestionQualityMetric(BaseModel):
    score: Optional[float] = None
    explanation: str = ""
    average_question_length: float = 0.0
    average_answer_length: float = 0.0
    high_leverage_count: int = 0
    low_leverage_count: int = 0

    def yield_ratio(self) -> Optional[float]:
        """Words answered per word asked, or None without questions."""
        if not self.average_question_length:
            return None
        return self.average_answer_length / self.average_question_length


class MonologueMetric(BaseModel):
    """Long uninterrupted rep turns, scored 0-20."""
    score: Optional[float] = None
    longest_turn_word_count: int = 0
    violation_count: int = 0


class TalkListenMetric(BaseModel):
    score: Optional[float] = None
    rep_talk_percentage: Optional[float] = None


class NextStepsMetric(BaseModel):
    score: Optional[float] = None
    secured: bool = False
    details: str = ""


class ScoreOnly(BaseModel):
    score: Optional[float] = None


class BehaviorMetrics(BaseModel):
    patience: Optional[PatienceMetric] = None
    question_quality: Optional[QuestionQualityMetric] = None
    monologue: Optional[MonologueMetric] = None
    talk_listen_ratio: Optional[TalkListenMetric] = None
    next_steps: Optional[NextStepsMetric] = None
    # Some behavior audits also score threading; the strategy audit is preferred
    strategic_threading: Optional[ScoreOnly] = None


class BehaviorAnalysis(BaseModel):
    """Objective conversational behavior measured from the transcript."""
    overall_score: Optional[float] = None
    grade: Optional[str] = None
    coaching_tip: str = ""
    metrics: BehaviorMetrics = Field(default_factory=BehaviorMetrics)

    @field_validator('metrics', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class RelevanceMapping(BaseModel):
    """One prospect pain and what the rep pitched against it."""
    pain_identified: str = ""
    feature_pitched: str = ""
    is_relevant: bool = False
    reasoning: str = ""


class StrategicThreading(BaseModel):
    """How well pitched features were tied to stated pains, scored 0-100."""
    score: Optional[float] = None
    grade: Optional[str] = None
    relevance_map: List[RelevanceMapping] = Field(default_factory=list)
    missed_opportunities: List[str] = Field(default_factory=list)

    def relevant_pitches(self) -> int:
        return sum(1 for mapping in self.relevance_map if mapping.is_relevant)


class MeddpiccElement(BaseModel):
    score: Optional[float] = None
    evidence: Optional[str] = None
    missing_info: Optional[str] = None


class StrategyMeddpicc(BaseModel):
    overall_score: Optional[float] = None
    breakdown: Dict[str, MeddpiccElement] = Field(default_factory=dict)


class StrategyAudit(BaseModel):
    """Deal strategy audit: strategic threading and MEDDPICC qualification."""
    strategic_threading: Optional[StrategicThreading] = None
    meddpicc: Optional[StrategyMeddpicc] = None


# =============================================================================
# Missing Information / Follow-up Items
# =============================================================================


class CriticalInfoItem(BaseModel):
    """A piece of qualifying information the rep failed to gather."""
    info: str
    missed_opportunity: str = ""


class FollowUpQuestion(BaseModel):
    """A question the rep should ask on the next touch."""
    question: str
    timing_example: str = ""


def _coerce_items(value: Any, text_field: str) -> Any:
    # Older grading output stored these lists as bare strings
    if value is None:
        return []
    if isinstance(value, list):
        return [{text_field: item} if isinstance(item, str) else item for item in value]
    return value


# =============================================================================
# Upstream Evaluation Records
# =============================================================================


class GradedCall(BaseModel):
    """
    Fields shared by a graded call and its synthesis projection.

    A call carries legacy framework_scores, the Analysis 2.0 blocks, or
    both. Read scores through the methods here rather than the raw blocks.
    """
    model_config = ConfigDict(frozen=True)

    framework_scores: Optional[FrameworkScores] = None
    analysis_behavior: Optional[BehaviorAnalysis] = None
    analysis_strategy: Optional[StrategyAudit] = None
    meddpicc_improvements: List[str] = Field(default_factory=list)
    bant_improvements: List[str] = Field(default_factory=list)
    gap_selling_improvements: List[str] = Field(default_factory=list)
    active_listening_improvements: List[str] = Field(default_factory=list)
    critical_info_missing: List[CriticalInfoItem] = Field(default_factory=list)
    follow_up_questions: List[FollowUpQuestion] = Field(default_factory=list)

    @field_validator('critical_info_missing', mode='before')
    @classmethod
    def _normalize_critical_info(cls, value: Any) -> Any:
        return _coerce_items(value, 'info')

    @field_validator('follow_up_questions', mode='before')
    @classmethod
    def _normalize_follow_ups(cls, value: Any) -> Any:
        return _coerce_items(value, 'question')

    @field_validator(
        'meddpicc_improvements', 'bant_improvements', 'gap_selling_improvements',
        'active_listening_improvements',
        mode='before',
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def has_analysis_2(self) -> bool:
        return self.analysis_behavior is not None or self.analysis_strategy is not None

    def _strategy_meddpicc(self) -> Optional[float]:
        if self.analysis_strategy is None or self.analysis_strategy.meddpicc is None:
            return None
        return self.analysis_strategy.meddpicc.overall_score

    def primary_framework(self) -> Optional[PrimaryFrameworkScore]:
        """Strategy-audit MEDDPICC, else legacy MEDDPICC, else legacy BANT."""
        strategy_score = self._strategy_meddpicc()
        if strategy_score is not None:
            return PrimaryFrameworkScore(
                framework=QualificationFramework.MEDDPICC,
                score=strategy_score,
            )
        if self.framework_scores is None:
            return None
        return self.framework_scores.primary_framework()

    def score_for(self, framework: str) -> Optional[float]:
        if framework == "meddpicc":
            strategy_score = self._strategy_meddpicc()
            if strategy_score is not None:
                return strategy_score
        if self.framework_scores is None:
            return None
        return self.framework_scores.score_for(framework)

    def _behavior_metrics(self) -> Optional[BehaviorMetrics]:
        return self.analysis_behavior.metrics if self.analysis_behavior else None

    def patience_score(self) -> Optional[float]:
        metrics = self._behavior_metrics()
        if metrics is None or metrics.patience is None:
            return None
        return metrics.patience.score

    def strategic_threading_score(self) -> Optional[float]:
        """Behavior-audit threading score, else the strategy audit's."""
        metrics = self._behavior_metrics()
        if metrics is not None and metrics.strategic_threading is not None:
            if metrics.strategic_threading.score is not None:
                return metrics.strategic_threading.score
        if self.analysis_strategy and self.analysis_strategy.strategic_threading:
            return self.analysis_strategy.strategic_threading.score
        return None

    def monologue_violations(self) -> Optional[int]:
        metrics = self._behavior_metrics()
        if metrics is None or metrics.monologue is None:
            return None
        return metrics.monologue.violation_count


class CallEvaluation(GradedCall):
    """
    One graded call as produced by the upstream grading process.

    Immutable; never written by this service.
    """
    id: str
    rep_id: str
    created_at: datetime
    heat_score: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    skill_tags: List[str] = Field(default_factory=list)
    deal_tags: List[str] = Field(default_factory=list)

    @field_validator('skill_tags', 'deal_tags', mode='before')
    @classmethod
    def _none_tags_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class FormattedRecord(GradedCall):
    """
    Projection of a CallEvaluation sent to the synthesis service.

    Created fresh for every analysis run; never persisted.
    """
    date: DateType
    heat_score: Optional[float] = None

    @classmethod
    def from_evaluation(cls, evaluation: CallEvaluation) -> "FormattedRecord":
        return cls(
            date=evaluation.created_at.date(),
            framework_scores=evaluation.framework_scores,
            analysis_behavior=evaluation.analysis_behavior,
            analysis_strategy=evaluation.analysis_strategy,
            meddpicc_improvements=evaluation.meddpicc_improvements,
            bant_improvements=evaluation.bant_improvements,
            gap_selling_improvements=evaluation.gap_selling_improvements,
            active_listening_improvements=evaluation.active_listening_improvements,
            critical_info_missing=evaluation.critical_info_missing,
            follow_up_questions=evaluation.follow_up_questions,
            heat_score=evaluation.heat_score,
        )


# =============================================================================
# Date Range
# =============================================================================


class DateRange(BaseModel):
    """Inclusive calendar date range; serialized as {"from": ..., "to": ...}."""
    model_config = ConfigDict(populate_by_name=True)

    start: DateType = Field(..., alias='from')
    end: DateType = Field(..., alias='to')

    @model_validator(mode='after')
    def _check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError(f"date range start {self.start} is after end {self.end}")
        return self

    def as_strings(self) -> Dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


# =============================================================================
# Chunk Summary (map-stage output)
# =============================================================================


class ChunkAverageScores(BaseModel):
    meddpicc: Optional[float] = None
    bant: Optional[float] = None
    gapSelling: Optional[float] = None
    activeListening: Optional[float] = None
    heat: Optional[float] = None
    patienceAvg: Optional[float] = None
    strategicThreadingAvg: Optional[float] = None
    monologueViolationsTotal: Optional[int] = None


class ChunkDominantTrends(BaseModel):
    meddpicc: Optional[TrendDirection] = None
    bant: Optional[TrendDirection] = None
    gapSelling: TrendDirection = TrendDirection.STABLE
    activeListening: TrendDirection = TrendDirection.STABLE
    patience: Optional[TrendDirection] = None
    strategicThreading: Optional[TrendDirection] = None
    monologue: Optional[TrendDirection] = None


class ChunkSummary(BaseModel):
    """
    Condensed summary of one weekly chunk of calls.

    Produced by the map stage of a hierarchical run and consumed only by
    the reduce stage.
    """
    model_config = ConfigDict(extra='ignore')

    chunkIndex: int = Field(..., ge=0)
    dateRange: DateRange
    callCount: int = Field(..., ge=0)
    avgScores: ChunkAverageScores = Field(default_factory=ChunkAverageScores)
    dominantTrends: ChunkDominantTrends = Field(default_factory=ChunkDominantTrends)
    topMissingInfo: List[str] = Field(default_factory=list)
    topImprovementAreas: List[str] = Field(default_factory=list)
    keyObservations: List[str] = Field(default_factory=list)


# =============================================================================
# Trend Analysis (final synthesis output, cached)
# =============================================================================


class FrameworkTrend(BaseModel):
    """Trajectory of one framework score over the period."""
    trend: TrendDirection = TrendDirection.STABLE
    startingAvg: float = 0.0
    endingAvg: float = 0.0
    keyInsight: str = ""
    evidence: List[str] = Field(default_factory=list)
    recommendation: str = ""


_NO_ANALYSIS_2_RECOMMENDATION = "Submit more calls with Analysis 2.0 data"


class PatienceTrend(BaseModel):
    """Acknowledgment discipline (0-30) over the period."""
    trend: TrendDirection = TrendDirection.STABLE
    startingAvg: float = 0.0
    endingAvg: float = 0.0
    avgInterruptions: float = 0.0
    keyInsight: str = "No patience data available"
    evidence: List[str] = Field(default_factory=list)
    recommendation: str = _NO_ANALYSIS_2_RECOMMENDATION


class StrategicThreadingTrend(BaseModel):
    """Pain-to-pitch relevance (0-100) over the period."""
    trend: TrendDirection = TrendDirection.STABLE
    startingAvg: float = 0.0
    endingAvg: float = 0.0
    avgRelevanceRatio: float = 0.0
    avgMissedOpportunities: float = 0.0
    keyInsight: str = "No strategic threading data available"
    evidence: List[str] = Field(default_factory=list)
    recommendation: str = _NO_ANALYSIS_2_RECOMMENDATION


class MonologueTrend(BaseModel):
    """Monologue violations over the period; fewer is better."""
    trend: TrendDirection = TrendDirection.STABLE
    totalViolations: int = 0
    avgPerCall: float = 0.0
    avgLongestTurn: float = 0.0
    keyInsight: str = "No monologue data available"
    evidence: List[str] = Field(default_factory=list)
    recommendation: str = _NO_ANALYSIS_2_RECOMMENDATION


class FrameworkTrends(BaseModel):
    """
    Per-framework trends.

    Only one of meddpicc / bant is normally present, depending on which
    framework the period's calls were graded against. The Analysis 2.0
    entries keep their "no data" defaults when no call carried the blocks.
    """
    meddpicc: Optional[FrameworkTrend] = None
    bant: Optional[FrameworkTrend] = None
    gapSelling: FrameworkTrend = Field(default_factory=FrameworkTrend)
    activeListening: FrameworkTrend = Field(default_factory=FrameworkTrend)
    patience: PatienceTrend = Field(default_factory=PatienceTrend)
    strategicThreading: StrategicThreadingTrend = Field(default_factory=StrategicThreadingTrend)
    monologueViolations: MonologueTrend = Field(default_factory=MonologueTrend)

    def primary_trend(self) -> FrameworkTrend:
        """MEDDPICC trend, else legacy BANT trend, else an empty stable trend."""
        if self.meddpicc is not None:
            return self.meddpicc
        if self.bant is not None:
            return self.bant
        return FrameworkTrend()

    def primary_framework(self) -> Optional[QualificationFramework]:
        if self.meddpicc is not None:
            return QualificationFramework.MEDDPICC
        if self.bant is not None:
            return QualificationFramework.BANT
        return None


class PeriodAnalysis(BaseModel):
    totalCalls: int = 0
    averageHeatScore: float = 0.0
    heatScoreTrend: TrendDirection = TrendDirection.STABLE


class PersistentGap(BaseModel):
    gap: str
    frequency: str = ""
    trend: GapTrend = GapTrend.STABLE


class CriticalInfoPattern(BaseModel):
    persistentGaps: List[PersistentGap] = Field(default_factory=list)
    newIssues: List[str] = Field(default_factory=list)
    resolvedIssues: List[str] = Field(default_factory=list)
    recommendation: str = ""


class FollowUpPattern(BaseModel):
    recurringThemes: List[str] = Field(default_factory=list)
    qualityTrend: TrendDirection = TrendDirection.STABLE
    recommendation: str = ""


class PatternAnalysis(BaseModel):
    criticalInfoMissing: CriticalInfoPattern = Field(default_factory=CriticalInfoPattern)
    followUpQuestions: FollowUpPattern = Field(default_factory=FollowUpPattern)


class PriorityItem(BaseModel):
    area: str
    reason: str = ""
    actionItem: str = ""


class TrendAnalysis(BaseModel):
    """
    Structured coaching trend analysis for a period.

    This is the unit that gets cached. Every sub-object has a default, so
    TrendAnalysis() is a valid, empty analysis and a partial payload from the
    synthesis service validates into a complete object.
    """
    model_config = ConfigDict(
        extra='ignore',
        json_schema_extra={
            "example": {
                "summary": "Discovery depth improved steadily; next steps remain inconsistent.",
                "periodAnalysis": {
                    "totalCalls": 42,
                    "averageHeatScore": 6.1,
                    "heatScoreTrend": "improving"
                },
                "trendAnalysis": {
                    "meddpicc": {
                        "trend": "improving",
                        "startingAvg": 54.0,
                        "endingAvg": 68.5,
                        "keyInsight": "Economic buyer identified far more often.",
                        "evidence": ["Named the CFO on 7 of the last 10 calls"],
                        "recommendation": "Confirm decision criteria before demos."
                    }
                },
                "topPriorities": [
                    {
                        "area": "Next steps",
                        "reason": "Secured on fewer than half of calls",
                        "actionItem": "Close every call with a dated follow-up."
                    }
                ]
            }
        }
    )

    summary: str = ""
    periodAnalysis: PeriodAnalysis = Field(default_factory=PeriodAnalysis)
    trendAnalysis: FrameworkTrends = Field(default_factory=FrameworkTrends)
    patternAnalysis: PatternAnalysis = Field(default_factory=PatternAnalysis)
    topPriorities: List[PriorityItem] = Field(default_factory=list)


# =============================================================================
# Run Metadata
# =============================================================================


class SamplingInfo(BaseModel):
    method: SamplingMethod = SamplingMethod.STRATIFIED
    originalCount: int = Field(..., ge=0)
    sampledCount: int = Field(..., ge=0)


class HierarchicalInfo(BaseModel):
    chunksAnalyzed: int = Field(..., ge=0)
    callsPerChunk: List[int] = Field(default_factory=list)


class AnalysisMetadata(BaseModel):
    """
    How a trend analysis was produced.

    analyzedCalls never exceeds totalCalls, and a sampled run reports the
    same number in samplingInfo.sampledCount and analyzedCalls.
    """
    tier: AnalysisTier
    totalCalls: int = Field(..., ge=0)
    analyzedCalls: int = Field(..., ge=0)
    samplingInfo: Optional[SamplingInfo] = None
    hierarchicalInfo: Optional[HierarchicalInfo] = None

    @model_validator(mode='after')
    def _check_counts(self) -> "AnalysisMetadata":
        if self.analyzedCalls > self.totalCalls:
            raise ValueError(
                f"analyzedCalls ({self.analyzedCalls}) exceeds totalCalls ({self.totalCalls})"
            )
        if self.samplingInfo is not None and self.samplingInfo.sampledCount != self.analyzedCalls:
            raise ValueError(
                f"samplingInfo.sampledCount ({self.samplingInfo.sampledCount}) "
                f"does not match analyzedCalls ({self.analyzedCalls})"
            )
        return self


class RepFrameworkScores(BaseModel):
    meddpicc: Optional[float] = None
    bant: Optional[float] = None
    gapSelling: Optional[float] = None
    activeListening: Optional[float] = None


class RepContribution(BaseModel):
    """One rep's share of a multi-rep batch and their average scores."""
    repId: str
    repName: str
    teamName: Optional[str] = None
    callCount: int = Field(..., ge=1)
    percentageOfTotal: float = Field(..., ge=0.0)
    averageHeatScore: Optional[float] = None
    frameworkScores: RepFrameworkScores = Field(default_factory=RepFrameworkScores)


class AggregateAnalysisMetadata(AnalysisMetadata):
    scope: AnalysisScope
    teamId: Optional[str] = None
    repsIncluded: int = Field(..., ge=0)
    repContributions: List[RepContribution] = Field(default_factory=list)
    cached: bool = False
    cachedAt: Optional[datetime] = None


class TrendResult(BaseModel):
    analysis: TrendAnalysis
    metadata: AnalysisMetadata


class AggregateTrendResult(BaseModel):
    analysis: TrendAnalysis
    metadata: AggregateAnalysisMetadata


# =============================================================================
# Directory Records
# =============================================================================


class RepProfile(BaseModel):
    id: str
    name: str = "Unknown"
    team_id: Optional[str] = None


class Team(BaseModel):
    id: str
    name: str


# =============================================================================
# Cache
# =============================================================================


class CacheEntry(BaseModel):
    """
    Stored trend analysis.

    Per-rep entries are validated by call_count; aggregate entries carry
    expires_at and the full aggregate metadata.
    """
    subject_id: str
    date_from: DateType
    date_to: DateType
    analysis: TrendAnalysis
    call_count: int = Field(..., ge=0)
    computed_at: datetime
    expires_at: Optional[datetime] = None
    metadata: Optional[AggregateAnalysisMetadata] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class TrendHistoryItem(BaseModel):
    """A stored per-rep analysis as listed in trend history."""
    id: str
    repId: str
    dateRangeFrom: DateType
    dateRangeTo: DateType
    callCount: int
    createdAt: datetime
    updatedAt: Optional[datetime] = None
    title: Optional[str] = None
    isSnapshot: bool = False
    analysis: TrendAnalysis


# =============================================================================
# API Request Bodies
# =============================================================================


class TrendRequest(BaseModel):
    """Body of POST /coaching-trends/reps/{rep_id}."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "from": "2025-01-01",
                "to": "2025-03-31",
                "forceRefresh": False
            }
        }
    )

    start: DateType = Field(..., alias='from')
    end: DateType = Field(..., alias='to')
    forceRefresh: bool = False

    def date_range(self) -> DateRange:
        """Raises ValueError when from is after to."""
        return DateRange(start=self.start, end=self.end)


class AggregateTrendRequest(TrendRequest):
    """Body of POST /coaching-trends/aggregate."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "scope": "team",
                "teamId": "team-west",
                "from": "2025-01-01",
                "to": "2025-03-31",
                "forceRefresh": False
            }
        }
    )

    scope: AnalysisScope
    teamId: Optional[str] = None
    repId: Optional[str] = None


# =============================================================================
# Coaching Summary (statistical, no synthesis)
# =============================================================================


class FrameworkTrendPoint(BaseModel):
    date: DateType
    primaryFramework: Optional[QualificationFramework] = None
    primaryScore: Optional[float] = None
    gapSelling: Optional[float] = None
    activeListening: Optional[float] = None


class ItemCount(BaseModel):
    item: str
    count: int


class TagCount(BaseModel):
    tag: str
    count: int


class RecurringPatterns(BaseModel):
    criticalInfoMissing: List[ItemCount] = Field(default_factory=list)
    followUpQuestions: List[ItemCount] = Field(default_factory=list)
    meddpiccImprovements: List[ItemCount] = Field(default_factory=list)
    bantImprovements: List[ItemCount] = Field(default_factory=list)
    gapSellingImprovements: List[ItemCount] = Field(default_factory=list)
    activeListeningImprovements: List[ItemCount] = Field(default_factory=list)


class AggregatedTags(BaseModel):
    skillTags: List[TagCount] = Field(default_factory=list)
    dealTags: List[TagCount] = Field(default_factory=list)


class HeatScorePoint(BaseModel):
    date: DateType
    score: float


class HeatScoreStats(BaseModel):
    average: Optional[float] = None
    trend: TrendDirection = TrendDirection.STABLE
    recentScores: List[HeatScorePoint] = Field(default_factory=list)


class CoachingSummary(BaseModel):
    """Counts and averages over a rep's evaluations; computed without synthesis."""
    totalCalls: int
    dateRange: DateRange
    frameworkTrends: List[FrameworkTrendPoint] = Field(default_factory=list)
    recurringPatterns: RecurringPatterns = Field(default_factory=RecurringPatterns)
    aggregatedTags: AggregatedTags = Field(default_factory=AggregatedTags)
    heatScoreStats: HeatScoreStats = Field(default_factory=HeatScoreStats)
