"""
Turn the raw CSV export of the inventory sheet into ``Record`` objects.

The sheet has a header row naming seven columns (sequence number, ISBN,
title, author, publisher, list price, stock) in Korean. Every cell is
trimmed; rows lacking a sequence number, ISBN or title are dropped.
Row order is preserved exactly, since the sheet order is the catalogue
order.

A payload that cannot be read as a table raises ``ParseError`` and
nothing is returned, so a broken export never produces a partial
catalogue.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from typing import Dict, List, Optional

from .errors import ParseError
from .schemas import Record

logger = logging.getLogger(__name__)

# Sheet header -> Record field
COLUMNS: Dict[str, str] = {
    "순번": "id",
    "ISBN": "isbn",
    "제목": "title",
    "저자": "author",
    "출판사": "publisher",
    "정가": "price",
    "재고": "stock",
}
REQUIRED_FIELDS = ("id", "isbn", "title")

_NON_DIGITS = re.compile(r"\D")


def parse_quantity(value: Optional[str]) -> int:
    """Read a decorated integer such as ``"1,200"`` or ``"3권"``.

    Every non-digit character is discarded and the remaining digits are
    read as a non-negative integer. When no digit is left (empty cell,
    ``"품절"``, ``None``) the result is ``0``; callers rely on that zero to
    classify the row as out of stock.
    """
    digits = _NON_DIGITS.sub("", value or "")
    return int(digits) if digits else 0


def _header_map(header: List[str]) -> Dict[int, str]:
    positions: Dict[int, str] = {}
    for index, name in enumerate(header):
        field = COLUMNS.get(name.strip())
        if field and field not in positions.values():
            positions[index] = field
    missing = [f for f in REQUIRED_FIELDS if f not in positions.values()]
    if missing:
        raise ParseError(details=f"missing required column(s): {', '.join(missing)}")
    return positions


def parse_records(text: str) -> List[Record]:
    """Parse CSV text into an ordered list of valid records.

    Raises
    ------
    ParseError
        If the payload has no header row, lacks a required column, has a
        row whose length differs from the header, or is not valid CSV.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text), strict=True)
    try:
        header = next(reader, None)
        if header is None:
            raise ParseError(details="empty payload, no header row")
        positions = _header_map(header)

        records: List[Record] = []
        parsed = 0
        for row in reader:
            if not row or all(not cell.strip() for cell in row):
                continue
            parsed += 1
            if len(row) != len(header):
                raise ParseError(
                    details=(
                        f"line {reader.line_num}: expected {len(header)} fields, "
                        f"got {len(row)}"
                    )
                )
            values = {field: row[index].strip() for index, field in positions.items()}
            if not all(values.get(f) for f in REQUIRED_FIELDS):
                continue
            records.append(Record(**values))
    except csv.Error as exc:
        raise ParseError(details=f"line {reader.line_num}: {exc}") from exc

    logger.info("Parsed records count: %d", parsed)
    logger.info("Filtered records count: %d", len(records))
    return records
