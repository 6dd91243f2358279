"""
Trend orchestration service.

Top-level entry point for generating coaching trend analyses. Every request
walks the same state machine:

    CHECK_CACHE -> COUNT -> CLASSIFY_TIER -> { direct | sampled | hierarchical }
        -> INVOKE_SYNTHESIS -> WRITE_CACHE -> RETURN

force_refresh skips the cache check (the result is still written). Zero
evaluations in range fails fast with NoDataError before any synthesis call.
Synthesis and chunk failures propagate unchanged: a failed hierarchical run
is never retried as a sampled or direct one.

Two entry points:
    generate_trend            one rep; cache validated by live call count
    generate_aggregate_trend  team or organization (TTL cache, per-rep
                              contributions); rep scope delegates to
                              generate_trend

Also serves the non-AI coaching summary and the stored-analysis history.

Usage:
    service = TrendService(evaluations, directory, cache, invoker, settings)
    result = await service.generate_trend("rep-1", DateRange(start=..., end=...))
    result.metadata.tier
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from coaching_trends.core.config import Settings
from coaching_trends.core.errors import NoDataError, NoRepsFoundError
from coaching_trends.models.enums import AnalysisScope, AnalysisTier
from coaching_trends.models.schemas import (
    AggregateAnalysisMetadata,
    AggregateTrendResult,
    AnalysisMetadata,
    CallEvaluation,
    CoachingSummary,
    DateRange,
    FormattedRecord,
    HierarchicalInfo,
    SamplingInfo,
    TrendAnalysis,
    TrendHistoryItem,
    TrendResult,
)
from coaching_trends.services.cache import TrendCache
from coaching_trends.services.coaching_summary import build_coaching_summary
from coaching_trends.services.contributions import calculate_rep_contributions
from coaching_trends.services.hierarchical import ChunkRunner, HierarchicalAnalyzer
from coaching_trends.services.sampling import stratified_sample
from coaching_trends.services.stores import EvaluationStore, SubjectDirectory
from coaching_trends.services.synthesis import SynthesisInvoker
from coaching_trends.services.tiering import determine_analysis_tier

logger = logging.getLogger(__name__)


def format_evaluation(evaluation: CallEvaluation) -> FormattedRecord:
    """Project an evaluation onto the fields the synthesis service reads."""
    return FormattedRecord.from_evaluation(evaluation)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _no_data(subject: str, date_range: DateRange) -> NoDataError:
    return NoDataError(subject, date_range.start.isoformat(), date_range.end.isoformat())


class TrendService:
    """
    Generates, caches and lists coaching trend analyses.

    Args:
        evaluations: Source of graded calls.
        directory: Resolves the reps behind team/organization scopes.
        cache: Per-rep and aggregate analysis cache.
        invoker: Typed boundary to the synthesis service.
        settings: Tier thresholds, chunk bounds, history page size.
        chunk_runner: Map-stage strategy for hierarchical runs; sequential
            when omitted.
        clock: Returns "now" as an aware datetime; used for aggregate TTLs.
    """

    def __init__(
        self,
        evaluations: EvaluationStore,
        directory: SubjectDirectory,
        cache: TrendCache,
        invoker: SynthesisInvoker,
        settings: Settings,
        chunk_runner: Optional[ChunkRunner] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.evaluations = evaluations
        self.directory = directory
        self.cache = cache
        self.invoker = invoker
        self.settings = settings
        self.clock = clock or _utcnow
        self.hierarchical = HierarchicalAnalyzer(
            invoker,
            chunk_runner=chunk_runner,
            min_chunk_size=settings.min_chunk_size,
            max_chunk_size=settings.max_chunk_size,
        )

    # =========================================================================
    # Tier execution
    # =========================================================================

    def classify(self, call_count: int) -> AnalysisTier:
        return determine_analysis_tier(
            call_count,
            direct_max=self.settings.direct_analysis_max,
            sampling_max=self.settings.sampling_max,
        )

    async def _analyze(
        self,
        evaluations: Sequence[CallEvaluation],
        date_range: DateRange,
    ) -> Tuple[TrendAnalysis, AnalysisMetadata]:
        """Format, pick a tier, run it, and describe how it ran."""
        records = [format_evaluation(e) for e in evaluations]
        total = len(records)
        tier = self.classify(total)
        logger.info("Analysis tier determined: %s for %d calls", tier.value, total)

        if tier == AnalysisTier.DIRECT:
            analysis = await self.invoker.synthesize(records, date_range)
            return analysis, AnalysisMetadata(tier=tier, totalCalls=total, analyzedCalls=total)

        if tier == AnalysisTier.SAMPLED:
            sample = stratified_sample(records, self.settings.direct_analysis_max)
            logger.info("Sampled %d of %d calls", len(sample.sampled), sample.original_count)
            analysis = await self.invoker.synthesize(sample.sampled, date_range)
            return analysis, AnalysisMetadata(
                tier=tier,
                totalCalls=total,
                analyzedCalls=len(sample.sampled),
                samplingInfo=SamplingInfo(
                    originalCount=sample.original_count,
                    sampledCount=len(sample.sampled),
                ),
            )

        result = await self.hierarchical.analyze(records, date_range)
        return result.analysis, AnalysisMetadata(
            tier=tier,
            totalCalls=total,
            analyzedCalls=sum(result.calls_per_chunk),
            hierarchicalInfo=HierarchicalInfo(
                chunksAnalyzed=result.chunks_analyzed,
                callsPerChunk=result.calls_per_chunk,
            ),
        )

    def _cached_metadata(self, live_count: int) -> AnalysisMetadata:
        # Tier is recomputed from the live count; sampling detail is not stored
        tier = self.classify(live_count)
        analyzed = live_count
        if tier == AnalysisTier.SAMPLED:
            analyzed = min(live_count, self.settings.direct_analysis_max)
        return AnalysisMetadata(tier=tier, totalCalls=live_count, analyzedCalls=analyzed)

    # =========================================================================
    # Single rep
    # =========================================================================

    async def generate_trend(
        self,
        rep_id: str,
        date_range: DateRange,
        force_refresh: bool = False,
    ) -> TrendResult:
        """
        Generate (or serve from cache) the trend analysis for one rep.

        Raises:
            NoDataError: No live evaluations in range.
            SynthesisError: Classified synthesis failure (direct / sampled /
                reduce stage).
            ChunkFailureError: A hierarchical map-stage call failed.
        """
        live_count = await self.evaluations.count([rep_id], date_range)

        if not force_refresh and live_count > 0:
            entry = await self.cache.get_rep_analysis(rep_id, date_range, live_count)
            if entry is not None:
                return TrendResult(analysis=entry.analysis, metadata=self._cached_metadata(live_count))

        if live_count == 0:
            raise _no_data(f"rep {rep_id}", date_range)

        evaluations = await self.evaluations.fetch([rep_id], date_range)
        if not evaluations:
            raise _no_data(f"rep {rep_id}", date_range)

        analysis, metadata = await self._analyze(evaluations, date_range)

        await self.cache.save_rep_analysis(
            rep_id, date_range, analysis, len(evaluations), now=self.clock()
        )
        return TrendResult(analysis=analysis, metadata=metadata)

    # =========================================================================
    # Team / organization
    # =========================================================================

    async def generate_aggregate_trend(
        self,
        scope: AnalysisScope,
        date_range: DateRange,
        team_id: Optional[str] = None,
        rep_id: Optional[str] = None,
        force_refresh: bool = False,
    ) -> AggregateTrendResult:
        """
        Generate (or serve from cache) a trend analysis across many reps.

        Raises:
            ValueError: Team scope without team_id, or rep scope without rep_id.
            NoRepsFoundError: The scope resolved to no reps.
            NoDataError: The reps have no live evaluations in range.
            SynthesisError / ChunkFailureError: As for generate_trend.
        """
        if scope == AnalysisScope.REP:
            if not rep_id:
                raise ValueError("rep scope requires a rep id")
            single = await self.generate_trend(rep_id, date_range, force_refresh)
            return AggregateTrendResult(
                analysis=single.analysis,
                metadata=AggregateAnalysisMetadata(
                    **single.metadata.model_dump(),
                    scope=AnalysisScope.REP,
                    repsIncluded=1,
                ),
            )

        if scope == AnalysisScope.TEAM and not team_id:
            raise ValueError("team scope requires a team id")
        scoped_team_id = team_id if scope == AnalysisScope.TEAM else None

        if not force_refresh:
            entry = await self.cache.get_aggregate(scope, scoped_team_id, date_range, now=self.clock())
            if entry is not None:
                metadata = entry.metadata.model_copy(update={"cached": True, "cachedAt": entry.computed_at})
                return AggregateTrendResult(analysis=entry.analysis, metadata=metadata)

        reps = await self.directory.list_reps(scope, scoped_team_id)
        if not reps:
            raise NoRepsFoundError(scope.value, scoped_team_id)

        team_names = {}
        if scope == AnalysisScope.ORGANIZATION:
            team_names = {team.id: team.name for team in await self.directory.list_teams()}

        evaluations = await self.evaluations.fetch([rep.id for rep in reps], date_range)
        if not evaluations:
            subject = f"team {scoped_team_id}" if scoped_team_id else "the organization"
            raise _no_data(subject, date_range)

        logger.info(
            "Aggregate %s analysis: %d calls across %d reps",
            scope.value, len(evaluations), len(reps),
        )
        contributions = calculate_rep_contributions(evaluations, reps, team_names, len(evaluations))

        analysis, base = await self._analyze(evaluations, date_range)
        metadata = AggregateAnalysisMetadata(
            **base.model_dump(),
            scope=scope,
            teamId=scoped_team_id,
            repsIncluded=len(reps),
            repContributions=contributions,
        )

        await self.cache.save_aggregate(
            scope, scoped_team_id, date_range, analysis, metadata, now=self.clock()
        )
        return AggregateTrendResult(analysis=analysis, metadata=metadata)

    # =========================================================================
    # Summary and history
    # =========================================================================

    async def get_coaching_summary(self, rep_id: str, date_range: DateRange) -> CoachingSummary:
        evaluations = await self.evaluations.fetch([rep_id], date_range)
        return build_coaching_summary(evaluations, date_range)

    async def list_history(
        self,
        rep_id: str,
        limit: Optional[int] = None,
        snapshots_only: bool = False,
    ) -> List[TrendHistoryItem]:
        """Stored analyses for a rep, newest first."""
        limit = self.settings.history_default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        return await self.cache.list_rep_history(rep_id, limit, snapshots_only)
