"""
Query composer for the catalogue front-end.

The composer owns everything the inventory page needs between user
input and rendering:

* the raw search box value and its debounced counterpart (300 ms of
  quiet before a search becomes effective);
* the stock and publisher filters and the current page;
* the listing and the recommendation panel, each with its own loading
  and error state;
* the client-local sort of the page on screen.

It runs on a single asyncio event loop. Listing and recommendation
requests each carry their own sequence number, and a response is applied
only if no newer request of the same kind has been issued since; superseded requests are
left to finish and their results are dropped. Nothing is ever
cancelled on the network.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Coroutine, Dict, List, NamedTuple, Optional, Set

from typing_extensions import Protocol

from ..catalog.display import StockStatus, format_price, stock_status
from ..catalog.schemas import CatalogPage, Pagination, Recommendations, Record
from .sorting import SortState, sort_records

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3
PAGE_SIZE = 20
SAMPLE_COUNT = 5


class CatalogTransport(Protocol):
    async def fetch_catalog(self, params: Dict[str, str]) -> CatalogPage: ...

    async def fetch_random(self, count: int) -> Recommendations: ...

    async def fetch_publishers(self) -> List[str]: ...


@dataclass
class ListingState:
    items: List[Record] = field(default_factory=list)
    pagination: Pagination = field(
        default_factory=lambda: Pagination(
            page=1, limit=PAGE_SIZE, total=0, total_pages=0, has_next=False, has_prev=False
        )
    )
    last_updated: Optional[datetime] = None
    loading: bool = False
    error: Optional[str] = None


@dataclass
class SampleState:
    recommendations: List[Record] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None


class DisplayRow(NamedTuple):
    record: Record
    price: str
    stock: StockStatus


class QueryComposer:
    """Turns user input into catalogue queries and keeps the visible state.

    Parameters
    ----------
    transport : CatalogTransport
        Issues the HTTP calls.
    restore_focus : Callable[[], None], optional
        Called after a listing response is applied when the search box
        had focus at the moment the request was issued.
    debounce_seconds : float
        Quiet period before a search term takes effect.
    """

    def __init__(
        self,
        transport: CatalogTransport,
        restore_focus: Optional[Callable[[], None]] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        page_size: int = PAGE_SIZE,
        sample_count: int = SAMPLE_COUNT,
    ) -> None:
        self._transport = transport
        self._restore_focus = restore_focus
        self._debounce_seconds = debounce_seconds
        self.page_size = page_size
        self.sample_count = sample_count

        self.search_input = ""
        self.debounced_search = ""
        self.stock_filter = "inStock"
        self.publisher = "all"
        self.page = 1
        self.search_focused = False

        self.sort = SortState()
        self.listing = ListingState()
        self.sample = SampleState()
        self.publishers: List[str] = []
        self.publishers_loaded = False

        self._sequence = 0
        self._sample_sequence = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    # -- input --------------------------------------------------------------

    def set_search_input(self, value: str) -> None:
        """Record a keystroke. Only the last value after a quiet period counts."""
        self.search_input = value
        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounce(value))

    async def _debounce(self, value: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._debounce_task = None
        if value != self.debounced_search:
            self.debounced_search = value
            self.issue(1)

    def set_stock_filter(self, value: str) -> Optional[asyncio.Task]:
        if value == self.stock_filter:
            return None
        self.stock_filter = value
        return self.issue(1)

    def set_publisher(self, value: str) -> Optional[asyncio.Task]:
        if value == self.publisher:
            return None
        self.publisher = value
        return self.issue(1)

    def go_to_page(self, page: int) -> Optional[asyncio.Task]:
        """Change page, keeping filters. Pages outside the known range are ignored."""
        if page < 1 or page > self.listing.pagination.total_pages:
            return None
        return self.issue(page)

    def select_sort(self, sort_field: str) -> None:
        self.sort.select(sort_field)

    def start(self) -> List[asyncio.Task]:
        """Initial load: first page, recommendations and the publisher list."""
        return [self.issue(1), self.load_sample(), self._spawn(self._load_publishers())]

    def refresh(self) -> List[asyncio.Task]:
        """Reload the current page and the publisher list."""
        self.publishers_loaded = False
        return [self.issue(self.page), self._spawn(self._load_publishers())]

    # -- listing ------------------------------------------------------------

    def build_params(self, page: int) -> Dict[str, str]:
        params = {"page": str(page), "limit": str(self.page_size)}
        search = self.debounced_search.strip()
        if search:
            params["search"] = search
        if self.stock_filter != "all":
            params["stockFilter"] = self.stock_filter
        if self.publisher != "all":
            params["publisher"] = self.publisher
        return params

    def issue(self, page: int) -> asyncio.Task:
        """Start a listing request for ``page`` with the current filters."""
        self._sequence += 1
        self.page = page
        self.listing.loading = True
        self.listing.error = None
        params = self.build_params(page)
        logger.debug("Issuing request #%d with params %s", self._sequence, params)
        return self._spawn(self._run_listing(self._sequence, params, self.search_focused))

    def is_current(self, sequence: int) -> bool:
        return sequence == self._sequence

    async def _run_listing(self, sequence: int, params: Dict[str, str], had_focus: bool) -> None:
        try:
            result = await self._transport.fetch_catalog(params)
        except Exception as exc:
            if not self.is_current(sequence):
                logger.debug("Dropping failure of superseded request #%d", sequence)
                return
            self.listing.error = str(exc)
        else:
            if not self.is_current(sequence):
                logger.debug("Dropping response of superseded request #%d", sequence)
                return
            self.listing.items = list(result.items)
            self.listing.pagination = result.pagination
            self.listing.last_updated = result.last_updated
        self.listing.loading = False
        if had_focus and self._restore_focus is not None:
            self._restore_focus()

    @property
    def sorted_items(self) -> List[Record]:
        return sort_records(self.listing.items, self.sort.field, self.sort.direction)

    def visible_rows(self) -> List[DisplayRow]:
        return [
            DisplayRow(record, format_price(record.price), stock_status(record.stock))
            for record in self.sorted_items
        ]

    # -- recommendations and publishers ---------------------------------------

    def load_sample(self) -> asyncio.Task:
        self._sample_sequence += 1
        self.sample.loading = True
        self.sample.error = None
        return self._spawn(self._run_sample(self._sample_sequence))

    async def _run_sample(self, sequence: int) -> None:
        try:
            result = await self._transport.fetch_random(self.sample_count)
        except Exception as exc:
            if sequence != self._sample_sequence:
                logger.debug("Dropping failure of superseded sample #%d", sequence)
                return
            self.sample.error = str(exc)
        else:
            if sequence != self._sample_sequence:
                logger.debug("Dropping response of superseded sample #%d", sequence)
                return
            self.sample.recommendations = list(result.recommendations)
        self.sample.loading = False

    async def _load_publishers(self) -> None:
        if self.publishers_loaded:
            return
        try:
            self.publishers = await self._transport.fetch_publishers()
        except Exception:
            logger.exception("Failed to load publishers")
            return
        self.publishers_loaded = True

    # -- plumbing -----------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def settle(self) -> None:
        """Wait until the debounce timer and every in-flight request are done."""
        while self._debounce_task is not None or self._pending:
            if self._debounce_task is not None:
                await asyncio.gather(self._debounce_task, return_exceptions=True)
            if self._pending:
                await asyncio.gather(*list(self._pending), return_exceptions=True)
