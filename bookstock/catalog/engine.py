"""
Filtering, searching and pagination over a catalogue snapshot.

Three independent predicates are ANDed together:

* free-text search: case-insensitive substring of title, author, ISBN
  or publisher;
* stock filter: ``inStock`` keeps a parsed stock above zero,
  ``outOfStock`` keeps exactly zero;
* publisher filter: exact, case-sensitive match.

The snapshot order is never changed. Pagination is applied after
filtering and a page past the end is an empty page, not an error.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Sequence

from .. import config
from .errors import InvalidParameter
from .normalizer import parse_quantity
from .schemas import STOCK_FILTERS, CatalogPage, CatalogQuery, Pagination, Record, Snapshot

logger = logging.getLogger(__name__)

Predicate = Callable[[Record], bool]


def _norm(s: str) -> str:
    return (s or "").strip().lower()


def validate_query(q: CatalogQuery) -> None:
    """Reject a query before any filtering work is done."""
    if q.page < 1 or q.limit < 1 or q.limit > config.MAX_LIMIT:
        raise InvalidParameter()
    if q.stock_filter not in STOCK_FILTERS:
        raise InvalidParameter(
            "Invalid stockFilter parameter",
            details=f"expected one of {', '.join(STOCK_FILTERS)}",
        )


def matches_search(term: str) -> Predicate:
    nq = _norm(term)

    def _matches(record: Record) -> bool:
        return (
            nq in record.title.lower()
            or nq in record.author.lower()
            or nq in record.isbn.lower()
            or nq in record.publisher.lower()
        )

    return _matches


def matches_stock(stock_filter: str) -> Predicate:
    if stock_filter == "inStock":
        return lambda record: parse_quantity(record.stock) > 0
    return lambda record: parse_quantity(record.stock) == 0


def matches_publisher(publisher: str) -> Predicate:
    return lambda record: record.publisher == publisher


def filter_records(records: Sequence[Record], q: CatalogQuery) -> List[Record]:
    """Apply every active predicate of ``q``, preserving input order."""
    items = list(records)

    if _norm(q.search):
        before = len(items)
        keep = matches_search(q.search)
        items = [r for r in items if keep(r)]
        logger.info("Search filtered (%r): %d -> %d", _norm(q.search), before, len(items))

    if q.stock_filter != "all":
        before = len(items)
        keep = matches_stock(q.stock_filter)
        items = [r for r in items if keep(r)]
        logger.info("Stock filtered (%s): %d -> %d", q.stock_filter, before, len(items))

    if q.publisher and q.publisher != "all":
        before = len(items)
        keep = matches_publisher(q.publisher)
        items = [r for r in items if keep(r)]
        logger.info("Publisher filtered (%s): %d -> %d", q.publisher, before, len(items))

    return items


def paginate(total: int, page: int, limit: int) -> Pagination:
    total_pages = math.ceil(total / limit) if total > 0 else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def query(snapshot: Snapshot, q: CatalogQuery) -> CatalogPage:
    """Run a listing query against one snapshot.

    Raises
    ------
    InvalidParameter
        If ``page`` or ``limit`` is out of range, or ``stock_filter`` is
        not a known value.
    """
    validate_query(q)

    items = filter_records(snapshot.records, q)
    pagination = paginate(len(items), q.page, q.limit)

    start = (q.page - 1) * q.limit
    end = start + q.limit
    page_items = items[start:end]
    logger.info(
        "Pagination: page %d, showing %d-%d of %d",
        q.page,
        start + 1 if page_items else 0,
        min(end, pagination.total),
        pagination.total,
    )

    return CatalogPage(items=page_items, pagination=pagination, last_updated=snapshot.fetched_at)


def publishers(snapshot: Snapshot) -> List[str]:
    """Distinct non-empty publisher names, sorted."""
    return sorted({r.publisher for r in snapshot.records if r.publisher})
