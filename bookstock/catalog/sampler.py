"""
Uniform random recommendations from a catalogue snapshot.

The eligible set is the snapshot, optionally restricted to records with
stock on hand. It is shuffled with Fisher-Yates and the first ``count``
records are returned, which makes every subset of that size equally
likely.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, TypeVar

from .. import config
from .normalizer import parse_quantity
from .schemas import Recommendations, Record, SampleQuery, Snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_sample_query(count: Optional[int] = None, include_out_of_stock: bool = False) -> SampleQuery:
    """Clamp ``count`` into ``[1, MAX_SAMPLE_COUNT]``; ``None`` means the default."""
    if count is None:
        count = config.DEFAULT_SAMPLE_COUNT
    count = max(1, min(count, config.MAX_SAMPLE_COUNT))
    return SampleQuery(count=count, include_out_of_stock=include_out_of_stock)


def eligible_records(records: Sequence[Record], include_out_of_stock: bool) -> List[Record]:
    if include_out_of_stock:
        return list(records)
    return [r for r in records if parse_quantity(r.stock) > 0]


def fisher_yates(items: Sequence[T], rng: random.Random) -> List[T]:
    """Return a shuffled copy of ``items``; the input is left untouched."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sample(snapshot: Snapshot, q: SampleQuery, rng: Optional[random.Random] = None) -> Recommendations:
    eligible = eligible_records(snapshot.records, q.include_out_of_stock)
    logger.info("Eligible records count: %d", len(eligible))

    if not eligible:
        return Recommendations(recommendations=[], total=0, last_updated=snapshot.fetched_at)

    actual_count = min(q.count, len(eligible))
    picked = fisher_yates(eligible, rng or random.Random())[:actual_count]
    logger.info("Selected %d random records", len(picked))

    return Recommendations(
        recommendations=picked,
        total=len(eligible),
        last_updated=snapshot.fetched_at,
    )
