"""
Two-stage map/reduce analysis for large batches.

Map: the batch is partitioned into weekly chunks and each chunk is summarized
by the synthesis service. Reduce: one more synthesis call receives the ordered
chunk summaries (never the raw records), the overall date range and the total
call count, and produces the final TrendAnalysis.

A failure on any chunk aborts the run with ChunkFailureError. There is no
partial result: a narrative built from a subset of chunks, without the reduce
stage knowing it is incomplete, would misstate the trend.

Map calls go through a ChunkRunner. SequentialChunkRunner (the default) awaits
one chunk at a time, which keeps the gateway's rate limit happy.
BoundedChunkRunner runs up to N chunks at once and can be swapped in without
touching partitioning or the reduce stage.

Usage:
    analyzer = HierarchicalAnalyzer(SynthesisInvoker(client))
    result = await analyzer.analyze(records, date_range)
    result.chunks_analyzed, result.calls_per_chunk
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Protocol

from coaching_trends.core.errors import ChunkFailureError, SynthesisError
from coaching_trends.models.schemas import ChunkSummary, DateRange, FormattedRecord, TrendAnalysis
from coaching_trends.services.chunking import MAX_CHUNK_SIZE, MIN_CHUNK_SIZE, split_into_weekly_chunks
from coaching_trends.services.synthesis import SynthesisInvoker

logger = logging.getLogger(__name__)

SummarizeFn = Callable[[int, List[FormattedRecord]], Awaitable[ChunkSummary]]


@dataclass
class HierarchicalResult:
    """Final analysis plus the shape of the map stage that produced it."""
    analysis: TrendAnalysis
    chunks_analyzed: int
    calls_per_chunk: List[int] = field(default_factory=list)


# =============================================================================
# Chunk Runners
# =============================================================================


class ChunkRunner(Protocol):
    """Executes the map stage; results come back in chunk order."""

    async def run(
        self, chunks: List[List[FormattedRecord]], summarize: SummarizeFn
    ) -> List[ChunkSummary]: ...


class SequentialChunkRunner:
    """Summarize chunks one after another; stops at the first failure."""

    async def run(
        self, chunks: List[List[FormattedRecord]], summarize: SummarizeFn
    ) -> List[ChunkSummary]:
        summaries: List[ChunkSummary] = []
        for index, chunk in enumerate(chunks):
            summaries.append(await summarize(index, chunk))
        return summaries


class BoundedChunkRunner:
    """
    Summarize up to ``max_concurrency`` chunks at a time.

    Every chunk runs to completion; if any failed, the failure with the lowest
    chunk index is raised so the error is the same one the sequential runner
    would have reported.
    """

    def __init__(self, max_concurrency: int = 3):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency

    async def run(
        self, chunks: List[List[FormattedRecord]], summarize: SummarizeFn
    ) -> List[ChunkSummary]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(index: int, chunk: List[FormattedRecord]) -> ChunkSummary:
            async with semaphore:
                return await summarize(index, chunk)

        results = await asyncio.gather(
            *(bounded(index, chunk) for index, chunk in enumerate(chunks)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)


# =============================================================================
# Analyzer
# =============================================================================


def chunk_date_range(chunk: List[FormattedRecord]) -> DateRange:
    """Earliest to latest record date inside a chunk."""
    dates = sorted(record.date for record in chunk)
    return DateRange(start=dates[0], end=dates[-1])


class HierarchicalAnalyzer:
    """
    Runs the map/reduce analysis over a formatted batch.

    Args:
        invoker: Synthesis invoker used for both stages.
        chunk_runner: Map-stage strategy; sequential by default.
        min_chunk_size / max_chunk_size: Partitioning bounds.
    """

    def __init__(
        self,
        invoker: SynthesisInvoker,
        chunk_runner: Optional[ChunkRunner] = None,
        min_chunk_size: int = MIN_CHUNK_SIZE,
        max_chunk_size: int = MAX_CHUNK_SIZE,
    ):
        self.invoker = invoker
        self.chunk_runner = chunk_runner or SequentialChunkRunner()
        self.min_chunk_size = min_chunk_size
        self.max_chunk_size = max_chunk_size

    async def analyze(self, records: List[FormattedRecord], date_range: DateRange) -> HierarchicalResult:
        """
        Summarize each weekly chunk, then synthesize the summaries.

        Args:
            records: Every formatted record in range, ascending by date.
            date_range: The overall requested range.

        Returns:
            HierarchicalResult; sum(calls_per_chunk) == len(records).

        Raises:
            ChunkFailureError: A map-stage call failed. ``cause`` carries the
                classified synthesis error.
            SynthesisError: The reduce-stage call failed.
            ValueError: records is empty.
        """
        if not records:
            raise ValueError("hierarchical analysis needs at least one record")

        chunks = split_into_weekly_chunks(records, self.min_chunk_size, self.max_chunk_size)
        total_chunks = len(chunks)
        logger.info("Split %d calls into %d chunks", len(records), total_chunks)

        async def summarize(index: int, chunk: List[FormattedRecord]) -> ChunkSummary:
            logger.info("Analyzing chunk %d/%d with %d calls", index + 1, total_chunks, len(chunk))
            try:
                return await self.invoker.summarize_chunk(chunk, index, chunk_date_range(chunk))
            except SynthesisError as e:
                raise ChunkFailureError(index, total_chunks, e) from e

        summaries = await self.chunk_runner.run(chunks, summarize)

        logger.info("All %d chunks analyzed, synthesizing", total_chunks)
        analysis = await self.invoker.synthesize_from_summaries(summaries, date_range, len(records))

        return HierarchicalResult(
            analysis=analysis,
            chunks_analyzed=total_chunks,
            calls_per_chunk=[len(chunk) for chunk in chunks],
        )
