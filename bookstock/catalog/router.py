"""
Route definitions for the catalogue API.

Endpoints under /catalog:
- GET  /catalog             : filtered, searched, paginated listing
- GET  /catalog/random      : uniform random recommendations
- GET  /catalog/publishers  : distinct publishers for the filter drop-down
- POST /catalog/revalidate  : invalidate cached snapshots by tag

Every read goes through the ``SnapshotCache`` held on ``app.state``;
each request works on the single snapshot it obtained up front.
Responses advertise the freshness policy of their surface so that
intermediary caches can serve them too.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from .. import config
from . import engine, sampler
from .cache import CATALOG_KEY, RANDOM_KEY, FreshnessPolicy, SnapshotCache
from .errors import InvalidParameter
from .schemas import CatalogPage, CatalogQuery, PublisherList, Recommendations, RevalidateResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])


def get_snapshot_cache(request: Request) -> SnapshotCache:
    return request.app.state.snapshot_cache


def get_rng() -> random.Random:
    return random.Random()


def _parse_int(value: Optional[str], default: int, name: str) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        raise InvalidParameter(details=f"{name} must be an integer, got {value!r}") from None


def _apply_cache_headers(response: Response, policy: FreshnessPolicy) -> None:
    response.headers["Cache-Control"] = policy.cache_control
    response.headers["CDN-Cache-Control"] = policy.cdn_cache_control


@router.get("", response_model=CatalogPage)
def list_catalog(
    response: Response,
    page: Optional[str] = Query(default=None, description="Page (1-indexed)"),
    limit: Optional[str] = Query(default=None, description="Page size, 1 to 1000"),
    search: Optional[str] = Query(default=None, description="Title/author/ISBN/publisher substring"),
    stock_filter: str = Query(default="all", alias="stockFilter", description="all | inStock | outOfStock"),
    publisher: str = Query(default="all", description="Exact publisher name or 'all'"),
    cache: SnapshotCache = Depends(get_snapshot_cache),
) -> CatalogPage:
    q = CatalogQuery(
        search=(search or "").strip(),
        stock_filter=stock_filter or "all",
        publisher=publisher,
        page=_parse_int(page, 1, "page"),
        limit=_parse_int(limit, config.DEFAULT_LIMIT, "limit"),
    )
    logger.info("Catalog called with params: %s", q.model_dump())

    # reject before touching the upstream
    engine.validate_query(q)

    snapshot, _ = cache.get(CATALOG_KEY)
    result = engine.query(snapshot, q)

    _apply_cache_headers(response, cache.policy(CATALOG_KEY))
    return result


@router.get("/random", response_model=Recommendations)
def random_recommendations(
    response: Response,
    count: Optional[str] = Query(default=None, description="Number of records, 1 to 20 (default 5)"),
    include_out_of_stock: Optional[str] = Query(
        default=None, alias="includeOutOfStock", description="'true' to include sold-out records"
    ),
    cache: SnapshotCache = Depends(get_snapshot_cache),
    rng: random.Random = Depends(get_rng),
) -> Recommendations:
    try:
        requested = int(count) if count is not None else None
    except ValueError:
        requested = None
    q = sampler.build_sample_query(requested, include_out_of_stock == "true")
    logger.info("Random called with params: %s", q.model_dump())

    snapshot, _ = cache.get(RANDOM_KEY)
    result = sampler.sample(snapshot, q, rng)

    _apply_cache_headers(response, cache.policy(RANDOM_KEY))
    return result


@router.get("/publishers", response_model=PublisherList)
def list_publishers(
    response: Response,
    cache: SnapshotCache = Depends(get_snapshot_cache),
) -> PublisherList:
    snapshot, _ = cache.get(CATALOG_KEY)
    _apply_cache_headers(response, cache.policy(CATALOG_KEY))
    return PublisherList(publishers=engine.publishers(snapshot), last_updated=snapshot.fetched_at)


@router.post("/revalidate", response_model=RevalidateResult)
def revalidate(
    tag: str = Query(..., description="Cache tag, e.g. books-data or books-random"),
    cache: SnapshotCache = Depends(get_snapshot_cache),
) -> RevalidateResult:
    return RevalidateResult(revalidated=cache.invalidate(tag), tag=tag)
