"""
Weekly chunk partitioning for the hierarchical analysis tier.

Splits a batch into contiguous, date-ordered chunks of comparable size so the
reduce stage receives summaries of roughly equal statistical weight.

Rules, applied week by week in chronological order:
    - Weeks accumulate into a running chunk while it still fits max_chunk_size.
    - When the next week would overflow, the running chunk is flushed if it has
      at least min_chunk_size records. An undersized run is carried forward
      into the next week's records instead; if the combination exceeds
      max_chunk_size, a full max_chunk_size chunk is emitted and the rest
      keeps running.
    - A week larger than max_chunk_size is sliced into max_chunk_size pieces,
      after prepending any undersized running chunk. A final slice shorter
      than min_chunk_size becomes the new running chunk.
    - A trailing run shorter than min_chunk_size merges into the last chunk,
      unless it is the only chunk.

Every input record appears in exactly one chunk.

Usage:
    from coaching_trends.services.chunking import split_into_weekly_chunks

    chunks = split_into_weekly_chunks(records, min_chunk_size=5, max_chunk_size=25)
"""

from typing import List, Sequence

from coaching_trends.services.tiering import RecordT, group_by_week


# =============================================================================
# Constants
# =============================================================================

MIN_CHUNK_SIZE: int = 5
MAX_CHUNK_SIZE: int = 25


def split_into_weekly_chunks(
    records: Sequence[RecordT],
    min_chunk_size: int = MIN_CHUNK_SIZE,
    max_chunk_size: int = MAX_CHUNK_SIZE,
) -> List[List[RecordT]]:
    """
    Partition records into weekly, size-bounded chunks.

    Args:
        records: Records exposing a ``date`` attribute.
        min_chunk_size: Smallest chunk emitted, except a lone chunk when the
            whole batch is smaller than this.
        max_chunk_size: Largest chunk assembled from whole weeks and the size
            of each slice of an oversized week. A trailing merge can push the
            last chunk above this by fewer than min_chunk_size records.

    Returns:
        Ordered, non-overlapping chunks covering every record exactly once.
        Empty input yields an empty list.

    Raises:
        ValueError: If min_chunk_size < 1 or max_chunk_size < min_chunk_size.

    Example:
        >>> # three single-call weeks, min_chunk_size=3
        >>> [len(c) for c in split_into_weekly_chunks(records, min_chunk_size=3)]
        [3]
    """
    if min_chunk_size < 1:
        raise ValueError(f"min_chunk_size must be at least 1, got {min_chunk_size}")
    if max_chunk_size < min_chunk_size:
        raise ValueError(
            f"max_chunk_size ({max_chunk_size}) must be >= min_chunk_size ({min_chunk_size})"
        )

    chunks: List[List[RecordT]] = []
    current: List[RecordT] = []

    for week in group_by_week(records):
        if len(week) > max_chunk_size:
            if len(current) >= min_chunk_size:
                chunks.append(current)
            else:
                week = current + week
            current = []

            for start in range(0, len(week), max_chunk_size):
                piece = week[start:start + max_chunk_size]
                if len(piece) >= min_chunk_size:
                    chunks.append(piece)
                else:
                    current = piece

        elif len(current) + len(week) <= max_chunk_size:
            current.extend(week)

        else:
            if len(current) >= min_chunk_size:
                chunks.append(current)
                current = list(week)
            else:
                # Undersized run cannot stand alone; carry it forward
                current = current + week
                if len(current) > max_chunk_size:
                    chunks.append(current[:max_chunk_size])
                    current = current[max_chunk_size:]

    if current:
        if len(current) >= min_chunk_size or not chunks:
            chunks.append(current)
        else:
            chunks[-1].extend(current)

    return chunks
