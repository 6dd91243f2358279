"""
HTTP client for the text-generation gateway that writes trend narratives.

The gateway speaks the OpenAI chat-completions protocol. Every request forces
a single tool call so the model answers with JSON arguments instead of prose:

    provide_trend_analysis  -> TrendAnalysis (direct, sampled and reduce stage)
    provide_chunk_summary   -> ChunkSummary  (map stage)

This client only moves bytes and validates shapes. It raises raw transport
errors (SynthesisHTTPError, SynthesisResponseError, httpx exceptions); the
SynthesisInvoker in services/synthesis.py turns those into the typed error
taxonomy.

Chunk averages are computed here with numpy rather than asked of the model,
so the numbers the reduce stage sees are exact.

Usage:
    client = GatewaySynthesisClient(get_settings())
    analysis = await client.synthesize(records, date_range)
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx
import numpy as np
from pydantic import ValidationError

from coaching_trends.core.config import Settings
from coaching_trends.models.enums import QualificationFramework
from coaching_trends.models.schemas import (
    BehaviorAnalysis,
    ChunkAverageScores,
    ChunkSummary,
    DateRange,
    FormattedRecord,
    StrategyAudit,
    TrendAnalysis,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Raw Transport Errors
# =============================================================================


class SynthesisHTTPError(Exception):
    """The gateway answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "", retry_after: Optional[int] = None):
        self.status_code = status_code
        self.body = body
        self.retry_after = retry_after
        super().__init__(f"AI Gateway error: {status_code}")


class SynthesisResponseError(Exception):
    """The gateway answered 2xx but without a usable tool call."""


# =============================================================================
# Prompts
# =============================================================================

TREND_ANALYSIS_SYSTEM_PROMPT = """You are an expert sales coaching analyst. Your job is to analyze a collection of call analyses from a sales rep and identify TRENDS in their performance over time.

Metrics to track:
1. MEDDPICC score - how well deals are qualified. Prefer the Strategy Analysis MEDDPICC score when a call has one. Calls graded before MEDDPICC carry a BANT score instead; treat BANT as the qualification score for those calls.
2. Gap Selling score - current state vs future state gap identification.
3. Active Listening score - follow-up questions and acknowledgment.
4. Critical information missing and recommended follow-up questions.
5. Heat score - prospect interest and urgency.

Analysis 2.0 metrics (present on recently graded calls):
6. Patience (0-30) - does the rep acknowledge what the prospect said before moving on? Track missed acknowledgments.
7. Strategic Threading (0-100) - are pitched solutions tied to the pains the prospect stated? Track relevance and missed opportunities.
8. Monologue violations - long uninterrupted rep turns. Fewer violations is an improvement.

If no call carries Analysis 2.0 data, report those three trends as stable with zero averages and say the data is not available.

For each metric, you must:
- Identify whether performance is IMPROVING, STABLE, or DECLINING
- Provide specific evidence from the calls
- Give actionable recommendations

Be direct and specific. Don't use vague language. If something is declining, say so clearly."""

HIERARCHICAL_SYNTHESIS_PROMPT = """You are an expert sales coaching analyst. Your job is to SYNTHESIZE multiple chunk summaries into a comprehensive trend analysis.

You are receiving pre-analyzed summaries of call batches, organized chronologically. Your task is to:
1. Identify overall trends across all chunks
2. Note how patterns evolved over time (early chunks vs recent chunks)
3. Aggregate the most common issues and improvements
4. Provide actionable recommendations based on the full picture

Focus on the big picture while noting specific evidence from the chunk summaries."""

CHUNK_SUMMARY_SYSTEM_PROMPT = """You are an expert sales coaching analyst. Your task is to analyze a small batch of call analyses and produce a CONDENSED SUMMARY that captures the essential patterns and trends.

This summary will be combined with other chunk summaries to form a comprehensive analysis, so focus on:
1. Direction of each framework score within the batch
2. Most frequent issues/patterns
3. Notable observations that should inform the final analysis

Be concise and data-driven. This is an intermediate step, not the final output."""


# =============================================================================
# Tool Schemas
# =============================================================================

_TREND_ENUM = {"type": "string", "enum": ["improving", "stable", "declining"]}

_FRAMEWORK_TREND_SCHEMA = {
    "type": "object",
    "properties": {
        "trend": _TREND_ENUM,
        "startingAvg": {"type": "number"},
        "endingAvg": {"type": "number"},
        "keyInsight": {"type": "string"},
        "evidence": {"type": "array", "items": {"type": "string"}},
        "recommendation": {"type": "string"},
    },
    "required": ["trend", "startingAvg", "endingAvg", "keyInsight", "evidence", "recommendation"],
}

_PATIENCE_TREND_SCHEMA = {
    "type": "object",
    "properties": {
        "trend": _TREND_ENUM,
        "startingAvg": {"type": "number", "description": "Average patience score (0-30) in the earliest calls"},
        "endingAvg": {"type": "number", "description": "Average patience score (0-30) in the latest calls"},
        "avgInterruptions": {"type": "number", "description": "Average missed acknowledgments per call"},
        "keyInsight": {"type": "string"},
        "evidence": {"type": "array", "items": {"type": "string"}},
        "recommendation": {"type": "string"},
    },
    "required": [
        "trend", "startingAvg", "endingAvg", "avgInterruptions",
        "keyInsight", "evidence", "recommendation",
    ],
}

_STRATEGIC_THREADING_TREND_SCHEMA = {
    "type": "object",
    "properties": {
        "trend": _TREND_ENUM,
        "startingAvg": {"type": "number", "description": "Average threading score (0-100) in the earliest calls"},
        "endingAvg": {"type": "number", "description": "Average threading score (0-100) in the latest calls"},
        "avgRelevanceRatio": {"type": "number", "description": "Average share of pitches matched to a stated pain"},
        "avgMissedOpportunities": {"type": "number", "description": "Average unaddressed pains per call"},
        "keyInsight": {"type": "string"},
        "evidence": {"type": "array", "items": {"type": "string"}},
        "recommendation": {"type": "string"},
    },
    "required": [
        "trend", "startingAvg", "endingAvg", "avgRelevanceRatio", "avgMissedOpportunities",
        "keyInsight", "evidence", "recommendation",
    ],
}

_MONOLOGUE_TREND_SCHEMA = {
    "type": "object",
    "properties": {
        "trend": {
            "type": "string",
            "enum": ["improving", "stable", "declining"],
            "description": "improving means fewer violations",
        },
        "totalViolations": {"type": "number"},
        "avgPerCall": {"type": "number"},
        "avgLongestTurn": {"type": "number", "description": "Average longest rep turn in words"},
        "keyInsight": {"type": "string"},
        "evidence": {"type": "array", "items": {"type": "string"}},
        "recommendation": {"type": "string"},
    },
    "required": [
        "trend", "totalViolations", "avgPerCall", "avgLongestTurn",
        "keyInsight", "evidence", "recommendation",
    ],
}

TREND_ANALYSIS_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "provide_trend_analysis",
        "description": "Provide structured trend analysis of the sales rep coaching data",
        "parameters": {
            "type": "object",
            "properties": {
                "summary": {
                    "type": "string",
                    "description": "2-3 sentence executive summary of overall performance trends",
                },
                "periodAnalysis": {
                    "type": "object",
                    "properties": {
                        "totalCalls": {"type": "number"},
                        "averageHeatScore": {"type": "number"},
                        "heatScoreTrend": _TREND_ENUM,
                    },
                    "required": ["totalCalls", "averageHeatScore", "heatScoreTrend"],
                },
                "trendAnalysis": {
                    "type": "object",
                    "properties": {
                        "meddpicc": _FRAMEWORK_TREND_SCHEMA,
                        "bant": _FRAMEWORK_TREND_SCHEMA,
                        "gapSelling": _FRAMEWORK_TREND_SCHEMA,
                        "activeListening": _FRAMEWORK_TREND_SCHEMA,
                        "patience": _PATIENCE_TREND_SCHEMA,
                        "strategicThreading": _STRATEGIC_THREADING_TREND_SCHEMA,
                        "monologueViolations": _MONOLOGUE_TREND_SCHEMA,
                    },
                    "required": [
                        "gapSelling", "activeListening",
                        "patience", "strategicThreading", "monologueViolations",
                    ],
                },
                "patternAnalysis": {
                    "type": "object",
                    "properties": {
                        "criticalInfoMissing": {
                            "type": "object",
                            "properties": {
                                "persistentGaps": {
                                    "type": "array",
                                    "items": {
                                        "type": "object",
                                        "properties": {
                                            "gap": {"type": "string"},
                                            "frequency": {"type": "string"},
                                            "trend": {
                                                "type": "string",
                                                "enum": ["improving", "stable", "worse"],
                                            },
                                        },
                                        "required": ["gap", "frequency", "trend"],
                                    },
                                },
                                "newIssues": {"type": "array", "items": {"type": "string"}},
                                "resolvedIssues": {"type": "array", "items": {"type": "string"}},
                                "recommendation": {"type": "string"},
                            },
                            "required": ["persistentGaps", "newIssues", "resolvedIssues", "recommendation"],
                        },
                        "followUpQuestions": {
                            "type": "object",
                            "properties": {
                                "recurringThemes": {"type": "array", "items": {"type": "string"}},
                                "qualityTrend": _TREND_ENUM,
                                "recommendation": {"type": "string"},
                            },
                            "required": ["recurringThemes", "qualityTrend", "recommendation"],
                        },
                    },
                    "required": ["criticalInfoMissing", "followUpQuestions"],
                },
                "topPriorities": {
                    "type": "array",
                    "description": "Top 3 priorities, most important first",
                    "items": {
                        "type": "object",
                        "properties": {
                            "area": {"type": "string"},
                            "reason": {"type": "string"},
                            "actionItem": {"type": "string"},
                        },
                        "required": ["area", "reason", "actionItem"],
                    },
                },
            },
            "required": ["summary", "periodAnalysis", "trendAnalysis", "patternAnalysis", "topPriorities"],
        },
    },
}

# Chunk summary fields the model writes; counts and averages are filled locally
CHUNK_NARRATIVE_FIELDS = ("dominantTrends", "topMissingInfo", "topImprovementAreas", "keyObservations")

CHUNK_SUMMARY_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "provide_chunk_summary",
        "description": "Provide condensed summary of this chunk of calls",
        "parameters": {
            "type": "object",
            "properties": {
                "dominantTrends": {
                    "type": "object",
                    "properties": {
                        "meddpicc": _TREND_ENUM,
                        "bant": _TREND_ENUM,
                        "gapSelling": _TREND_ENUM,
                        "activeListening": _TREND_ENUM,
                        "patience": _TREND_ENUM,
                        "strategicThreading": _TREND_ENUM,
                        "monologue": _TREND_ENUM,
                    },
                    "required": ["gapSelling", "activeListening"],
                },
                "topMissingInfo": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Top 3-5 most frequently missing pieces of information",
                },
                "topImprovementAreas": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Top 3-5 areas that need improvement across all frameworks",
                },
                "keyObservations": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "2-3 key observations that should inform the overall analysis",
                },
            },
            "required": ["dominantTrends", "topMissingInfo", "topImprovementAreas", "keyObservations"],
        },
    },
}


# =============================================================================
# Prompt Formatting
# =============================================================================


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f}"


def _count(value: Optional[int]) -> str:
    return "N/A" if value is None else str(value)


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return float(np.mean(np.array(values, dtype=np.float64)))


def _present(values: Iterable[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]


def compute_chunk_averages(records: List[FormattedRecord]) -> ChunkAverageScores:
    """
    Per-framework and heat means over a chunk, ignoring ungraded calls.

    Monologue violations are summed rather than averaged. Every Analysis 2.0
    figure is None when no call in the chunk carries it.
    """
    def scores(framework: str) -> List[float]:
        return _present(r.score_for(framework) for r in records)

    violations = _present(r.monologue_violations() for r in records)
    return ChunkAverageScores(
        meddpicc=_mean(scores("meddpicc")),
        bant=_mean(scores("bant")),
        gapSelling=_mean(scores("gap_selling")),
        activeListening=_mean(scores("active_listening")),
        heat=_mean(_present(r.heat_score for r in records)),
        patienceAvg=_mean(_present(r.patience_score() for r in records)),
        strategicThreadingAvg=_mean(_present(r.strategic_threading_score() for r in records)),
        monologueViolationsTotal=int(np.sum(violations)) if violations else None,
    )


def _behavior_lines(behavior: BehaviorAnalysis) -> List[str]:
    lines = ["**Behavior Analysis (Analysis 2.0):**"]
    grade = f" ({behavior.grade})" if behavior.grade else ""
    lines.append(f"- Overall Behavior Score: {_fmt(behavior.overall_score)}/100{grade}")

    metrics = behavior.metrics
    if metrics.patience is not None:
        patience = metrics.patience
        lines.append(
            f"- Acknowledgment Score: {_fmt(patience.score)}/30 "
            f"({patience.missed_acknowledgment_count} missed acknowledgments)"
        )
    if metrics.question_quality is not None:
        quality = metrics.question_quality
        ratio = quality.yield_ratio()
        lines.append(
            f"- Question Yield: {quality.average_answer_length:g} words per answer vs "
            f"{quality.average_question_length:g} words per question "
            f"({_fmt(ratio)}:1 ratio, {quality.high_leverage_count} high leverage, "
            f"{quality.low_leverage_count} low leverage)"
        )
    if metrics.monologue is not None:
        monologue = metrics.monologue
        lines.append(
            f"- Monologue Score: {_fmt(monologue.score)}/20 ({monologue.violation_count} violations, "
            f"longest: {monologue.longest_turn_word_count} words)"
        )
    if metrics.talk_listen_ratio is not None:
        lines.append(f"- Talk Ratio: {_fmt(metrics.talk_listen_ratio.rep_talk_percentage)}% rep talk time")
    if metrics.next_steps is not None:
        lines.append(f"- Next Steps: {'SECURED' if metrics.next_steps.secured else 'NOT SECURED'}")
    if behavior.coaching_tip:
        lines.append(f"- Coaching Tip: {behavior.coaching_tip}")
    return lines


def _strategy_lines(strategy: StrategyAudit) -> List[str]:
    lines = ["**Strategy Analysis (Analysis 2.0):**"]
    threading = strategy.strategic_threading
    if threading is not None:
        grade = f" ({threading.grade})" if threading.grade else ""
        lines.append(f"- Strategic Threading Score: {_fmt(threading.score)}/100{grade}")
    if strategy.meddpicc is not None:
        lines.append(f"- MEDDPICC Score: {_fmt(strategy.meddpicc.overall_score)}/100")
    if threading is not None:
        if threading.relevance_map:
            lines.append(
                f"- Pitch Relevance: {threading.relevant_pitches()}/{len(threading.relevance_map)} "
                "solutions matched pains"
            )
        if threading.missed_opportunities:
            lines.append(f"- Missed Opportunities: {len(threading.missed_opportunities)} pains not addressed")
    return lines


def _legacy_score_lines(record: FormattedRecord) -> List[str]:
    lines = []
    scores = record.framework_scores
    if scores is not None:
        lines.append("**Framework Scores:**")
        primary = record.primary_framework()
        if primary is not None:
            label = "MEDDPICC" if primary.framework == QualificationFramework.MEDDPICC else "BANT (legacy)"
            lines.append(f"- {label}: {primary.score:g}/100 - {primary.summary or 'No summary'}")
        for key, label in (("gap_selling", "Gap Selling"), ("active_listening", "Active Listening")):
            block = getattr(scores, key)
            if block is not None:
                lines.append(f"- {label}: {block.score:g}/100 - {block.summary or 'No summary'}")
            else:
                lines.append(f"- {label}: N/A")
    return lines


def _legacy_detail_lines(record: FormattedRecord) -> List[str]:
    lines = []
    if record.meddpicc_improvements:
        lines.append(f"MEDDPICC Improvements Needed: {'; '.join(record.meddpicc_improvements)}")
    elif record.bant_improvements:
        lines.append(f"BANT Improvements Needed (legacy): {'; '.join(record.bant_improvements)}")
    if record.gap_selling_improvements:
        lines.append(f"Gap Selling Improvements Needed: {'; '.join(record.gap_selling_improvements)}")
    if record.active_listening_improvements:
        lines.append(
            f"Active Listening Improvements Needed: {'; '.join(record.active_listening_improvements)}"
        )
    if record.critical_info_missing:
        missing = "; ".join(item.info for item in record.critical_info_missing)
        lines.append(f"Critical Info Missing: {missing}")
    if record.follow_up_questions:
        questions = "; ".join(item.question for item in record.follow_up_questions)
        lines.append(f"Recommended Follow-ups: {questions}")
    return lines


def format_records_for_prompt(records: List[FormattedRecord]) -> str:
    """
    Render formatted records as numbered markdown sections.

    Calls with Analysis 2.0 blocks are rendered from those blocks; the legacy
    framework scores and improvement lists are shown only for calls without
    them.
    """
    sections = []
    for index, record in enumerate(records, start=1):
        lines = [f"### Call {index} ({record.date.isoformat()})"]

        heat = [f"Heat Score: {record.heat_score:g}/10"] if record.heat_score is not None else []
        if record.has_analysis_2():
            if record.analysis_behavior is not None:
                lines.extend(_behavior_lines(record.analysis_behavior))
            if record.analysis_strategy is not None:
                lines.extend(_strategy_lines(record.analysis_strategy))
            lines.extend(heat)
        else:
            lines.extend(_legacy_score_lines(record))
            lines.extend(heat)
            lines.extend(_legacy_detail_lines(record))

        sections.append("\n".join(lines))

    return "\n\n".join(sections)


def format_chunk_summaries_for_prompt(summaries: List[ChunkSummary]) -> str:
    """Render chunk summaries as chronological period sections."""
    sections = []
    for index, chunk in enumerate(summaries, start=1):
        avg = chunk.avgScores
        trends = chunk.dominantTrends
        lines = [
            f"### Period {index}: {chunk.dateRange.start.isoformat()} to "
            f"{chunk.dateRange.end.isoformat()} ({chunk.callCount} calls)",
            "**Framework Scores:**",
        ]
        if avg.meddpicc is not None:
            lines.append(f"- MEDDPICC: {_fmt(avg.meddpicc)}/100")
        elif avg.bant is not None:
            lines.append(f"- BANT (legacy): {_fmt(avg.bant)}/100")
        lines.append(f"- Gap Selling: {_fmt(avg.gapSelling)}/100")
        lines.append(f"- Active Listening: {_fmt(avg.activeListening)}/100")
        lines.append(f"- Heat: {_fmt(avg.heat)}/10")

        lines.append("Framework Trends:")
        if trends.meddpicc is not None:
            lines.append(f"- MEDDPICC: {trends.meddpicc.value}")
        elif trends.bant is not None:
            lines.append(f"- BANT (legacy): {trends.bant.value}")
        lines.append(f"- Gap Selling: {trends.gapSelling.value}")
        lines.append(f"- Active Listening: {trends.activeListening.value}")

        if avg.patienceAvg is not None or avg.strategicThreadingAvg is not None:
            lines.append("**Analysis 2.0 Metrics:**")
            if avg.patienceAvg is not None:
                lines.append(f"- Patience Score: {_fmt(avg.patienceAvg)}/30")
            if avg.strategicThreadingAvg is not None:
                lines.append(f"- Strategic Threading Score: {_fmt(avg.strategicThreadingAvg)}/100")
            if avg.monologueViolationsTotal is not None:
                lines.append(f"- Total Monologue Violations: {avg.monologueViolationsTotal}")

            analysis_2_trends = [
                (label, direction)
                for label, direction in (
                    ("Patience", trends.patience),
                    ("Strategic Threading", trends.strategicThreading),
                    ("Monologue Discipline", trends.monologue),
                )
                if direction is not None
            ]
            if analysis_2_trends:
                lines.append("Analysis 2.0 Trends:")
                lines.extend(f"- {label}: {direction.value}" for label, direction in analysis_2_trends)

        if chunk.topMissingInfo:
            lines.append(f"Top Missing Information: {'; '.join(chunk.topMissingInfo)}")
        if chunk.topImprovementAreas:
            lines.append(f"Top Improvement Areas: {'; '.join(chunk.topImprovementAreas)}")
        if chunk.keyObservations:
            lines.append(f"Key Observations: {'; '.join(chunk.keyObservations)}")

        sections.append("\n".join(lines))

    return "\n\n".join(sections)


def _chunk_user_prompt(records: List[FormattedRecord], date_range: DateRange,
                       averages: ChunkAverageScores) -> str:
    primary_label = "MEDDPICC" if averages.meddpicc is not None else "BANT"
    primary_avg = averages.meddpicc if averages.meddpicc is not None else averages.bant

    meddpicc_improvements = [i for r in records for i in r.meddpicc_improvements]
    primary_improvements = meddpicc_improvements or [i for r in records for i in r.bant_improvements]
    gap_improvements = [i for r in records for i in r.gap_selling_improvements]
    listening_improvements = [i for r in records for i in r.active_listening_improvements]
    missing_info = [item.info for r in records for item in r.critical_info_missing]

    return (
        f"Analyze this batch of {len(records)} calls from {date_range.start.isoformat()} "
        f"to {date_range.end.isoformat()}:\n\n"
        "Quick Stats:\n"
        f"- Average {primary_label} Score: {_fmt(primary_avg)}\n"
        f"- Average Gap Selling Score: {_fmt(averages.gapSelling)}\n"
        f"- Average Active Listening Score: {_fmt(averages.activeListening)}\n"
        f"- Average Heat Score: {_fmt(averages.heat)}\n"
        f"- Average Patience Score: {_fmt(averages.patienceAvg)}\n"
        f"- Average Strategic Threading Score: {_fmt(averages.strategicThreadingAvg)}\n"
        f"- Total Monologue Violations: {_count(averages.monologueViolationsTotal)}\n\n"
        f"{primary_label} Improvements Mentioned: {'; '.join(primary_improvements) or 'None'}\n"
        f"Gap Selling Improvements Mentioned: {'; '.join(gap_improvements) or 'None'}\n"
        f"Active Listening Improvements Mentioned: {'; '.join(listening_improvements) or 'None'}\n"
        f"Critical Info Missing: {'; '.join(missing_info) or 'None'}\n\n"
        "Provide a condensed summary of this chunk's patterns and trends."
    )


# =============================================================================
# Gateway Client
# =============================================================================


class GatewaySynthesisClient:
    """
    Synthesis collaborator backed by an OpenAI-compatible gateway.

    Args:
        settings: Application settings (endpoint, key, model, limits).
        http_client: Optional shared httpx.AsyncClient. When omitted, a client
            is opened per request with the configured timeout.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client
        self.headers = {"Content-Type": "application/json"}
        if settings.synthesis_api_key:
            self.headers["Authorization"] = f"Bearer {settings.synthesis_api_key}"

    async def synthesize(self, records: List[FormattedRecord], date_range: DateRange) -> TrendAnalysis:
        user_prompt = (
            f"Analyze the following {len(records)} call analyses from "
            f"{date_range.start.isoformat()} to {date_range.end.isoformat()} and identify trends:\n\n"
            f"{format_records_for_prompt(records)}\n\n"
            "Provide a comprehensive trend analysis with specific evidence and actionable recommendations."
        )
        arguments = await self._call_tool(
            TREND_ANALYSIS_SYSTEM_PROMPT, user_prompt, TREND_ANALYSIS_TOOL,
            self.settings.synthesis_max_tokens,
        )
        return self._to_trend_analysis(arguments, total_calls=len(records))

    async def summarize_chunk(
        self,
        records: List[FormattedRecord],
        chunk_index: int,
        date_range: DateRange,
    ) -> ChunkSummary:
        averages = compute_chunk_averages(records)
        arguments = await self._call_tool(
            CHUNK_SUMMARY_SYSTEM_PROMPT,
            _chunk_user_prompt(records, date_range, averages),
            CHUNK_SUMMARY_TOOL,
            self.settings.chunk_summary_max_tokens,
        )
        narrative = {k: v for k, v in arguments.items() if k in CHUNK_NARRATIVE_FIELDS}
        try:
            return ChunkSummary(
                chunkIndex=chunk_index,
                dateRange=date_range,
                callCount=len(records),
                avgScores=averages,
                **narrative,
            )
        except ValidationError as e:
            raise SynthesisResponseError(f"Chunk summary failed validation: {e.error_count()} errors") from e

    async def synthesize_from_summaries(
        self,
        summaries: List[ChunkSummary],
        date_range: DateRange,
        total_calls: int,
    ) -> TrendAnalysis:
        user_prompt = (
            f"Synthesize the following {len(summaries)} period summaries covering {total_calls} "
            f"total calls from {date_range.start.isoformat()} to {date_range.end.isoformat()}:\n\n"
            f"{format_chunk_summaries_for_prompt(summaries)}\n\n"
            "Provide a comprehensive trend analysis that identifies patterns across all periods, "
            "noting how performance evolved over time."
        )
        arguments = await self._call_tool(
            HIERARCHICAL_SYNTHESIS_PROMPT, user_prompt, TREND_ANALYSIS_TOOL,
            self.settings.synthesis_max_tokens,
        )
        return self._to_trend_analysis(arguments, total_calls=total_calls)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_trend_analysis(arguments: Dict[str, Any], total_calls: int) -> TrendAnalysis:
        if not isinstance(arguments.get("periodAnalysis"), dict):
            arguments["periodAnalysis"] = {"totalCalls": total_calls}
        try:
            return TrendAnalysis.model_validate(arguments)
        except ValidationError as e:
            raise SynthesisResponseError(f"Trend analysis failed validation: {e.error_count()} errors") from e

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.settings.synthesis_api_url,
                json=payload,
                headers=self.headers,
                timeout=self.settings.synthesis_timeout_seconds,
            )
        async with httpx.AsyncClient(timeout=self.settings.synthesis_timeout_seconds) as client:
            return await client.post(self.settings.synthesis_api_url, json=payload, headers=self.headers)

    async def _call_tool(
        self,
        system_prompt: str,
        user_prompt: str,
        tool: Dict[str, Any],
        max_tokens: int,
    ) -> Dict[str, Any]:
        """
        Send one forced tool call and return its parsed arguments.

        Raises:
            SynthesisHTTPError: Non-2xx response.
            SynthesisResponseError: Missing, mismatched or non-JSON tool call.
            httpx.TimeoutException / httpx.RequestError: Transport failures.
        """
        tool_name = tool["function"]["name"]
        payload = {
            "model": self.settings.synthesis_model,
            "temperature": self.settings.synthesis_temperature,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "tools": [tool],
            "tool_choice": {"type": "function", "function": {"name": tool_name}},
        }

        response = await self._post(payload)

        if response.is_error:
            retry_after = response.headers.get("Retry-After")
            raise SynthesisHTTPError(
                response.status_code,
                response.text,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SynthesisResponseError("Gateway returned a non-JSON body") from e

        try:
            tool_call = data["choices"][0]["message"]["tool_calls"][0]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected gateway response: %s", str(data)[:500])
            raise SynthesisResponseError("AI did not return expected structured output") from e

        function = tool_call.get("function") or {}
        if function.get("name") != tool_name:
            raise SynthesisResponseError(
                f"Expected tool call {tool_name}, got {function.get('name')!r}"
            )

        try:
            arguments = json.loads(function.get("arguments") or "")
        except ValueError as e:
            raise SynthesisResponseError("Failed to parse AI analysis") from e

        if not isinstance(arguments, dict):
            raise SynthesisResponseError("Tool arguments are not a JSON object")

        return arguments
