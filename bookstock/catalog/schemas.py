"""
Pydantic schema definitions for the catalog module.

The ``Record`` model captures one inventory row exactly as the sheet
displays it: price and stock stay strings because the sheet decorates
them with thousands separators and the front-end renders them verbatim.
Records and snapshots are frozen so that a snapshot handed to a request
can never change underneath it.

Wire models serialise with camelCase aliases (``totalPages``,
``lastUpdated`` ...) since that is what the browser client consumes;
Python code uses the snake_case attribute names.
"""

from datetime import datetime
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

STOCK_FILTERS: Tuple[str, ...] = ("all", "inStock", "outOfStock")


class Record(BaseModel):
    """A single inventory row.

    ``id``, ``isbn`` and ``title`` are guaranteed non-empty by the
    normalizer; the remaining fields default to an empty string when the
    sheet leaves them blank.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    isbn: str
    title: str
    author: str = ""
    publisher: str = ""
    price: str = ""
    stock: str = ""


class Snapshot(BaseModel):
    """One complete, normalized copy of the inventory.

    ``fetched_at`` is the moment the upstream fetch started, which is
    what clients see as ``lastUpdated``.
    """

    model_config = ConfigDict(frozen=True)

    records: Tuple[Record, ...]
    fetched_at: datetime


class CatalogQuery(BaseModel):
    """Listing request as received from the client.

    Nothing here is range-checked; ``engine.validate_query`` owns that so
    that a bad request surfaces as ``InvalidParameter`` rather than a
    pydantic validation error.
    """

    search: str = ""
    stock_filter: str = "all"
    publisher: str = "all"
    page: int = 1
    limit: int = 20


class SampleQuery(BaseModel):
    # count is clamped by sampler.build_sample_query, not here
    count: int = 5
    include_out_of_stock: bool = False


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Pagination(_WireModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class CatalogPage(_WireModel):
    """Response of ``GET /catalog``.

    ``pagination.total`` counts every record that passed the filters,
    not just the ones on this page.
    """

    items: List[Record]
    pagination: Pagination
    last_updated: datetime = Field(alias="lastUpdated")


class Recommendations(_WireModel):
    """Response of ``GET /catalog/random``.

    ``total`` is the size of the eligible set the sample was drawn from.
    """

    recommendations: List[Record]
    total: int
    last_updated: datetime = Field(alias="lastUpdated")


class PublisherList(_WireModel):
    publishers: List[str]
    last_updated: datetime = Field(alias="lastUpdated")


class RevalidateResult(BaseModel):
    revalidated: bool
    tag: str
