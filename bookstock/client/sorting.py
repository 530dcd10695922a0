"""
Client-local ordering of the page currently on screen.

Only the loaded page is sorted; the server-side order across pages is
left alone. ``price`` and ``stock`` compare as integers once thousands
separators are removed, everything else compares as plain strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from typing_extensions import Literal

from ..catalog.schemas import Record

SortField = Literal["title", "author", "publisher", "price", "stock"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: Tuple[str, ...] = ("title", "author", "publisher", "price", "stock")
NUMERIC_FIELDS = frozenset({"price", "stock"})

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def numeric_value(value: str) -> int:
    """``"12,000"`` -> 12000. Anything without leading digits is 0."""
    m = _LEADING_INT.match((value or "").replace(",", ""))
    return int(m.group(1)) if m else 0


def sort_key(field: str):
    if field in NUMERIC_FIELDS:
        return lambda record: numeric_value(getattr(record, field))
    return lambda record: getattr(record, field)


def sort_records(records: Iterable[Record], field: str, direction: str = "asc") -> List[Record]:
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {field!r}")
    return sorted(records, key=sort_key(field), reverse=direction == "desc")


@dataclass
class SortState:
    field: SortField = "title"
    direction: SortDirection = "asc"

    def select(self, field: Union[SortField, str]) -> None:
        """Pick a column: a new column sorts ascending, the active one flips."""
        if field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {field!r}")
        if field == self.field:
            self.direction = "desc" if self.direction == "asc" else "asc"
        else:
            self.field = field
            self.direction = "asc"
