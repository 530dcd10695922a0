"""Formatting helpers shared by the catalogue views."""

from __future__ import annotations

import re
from typing import NamedTuple

from .normalizer import parse_quantity

CURRENCY_SUFFIX = "원"
OUT_OF_STOCK_LABEL = "품절"

_LEADING_INT = re.compile(r"^\s*(\d+)")


class StockStatus(NamedTuple):
    status: str
    text: str


def format_price(price: str) -> str:
    """``"12000"`` or ``"12,000"`` -> ``"12,000원"``.

    A price without leading digits is returned unchanged.
    """
    m = _LEADING_INT.match((price or "").replace(",", ""))
    if not m:
        return price
    return f"{int(m.group(1)):,}{CURRENCY_SUFFIX}"


def stock_status(stock: str) -> StockStatus:
    if parse_quantity(stock) > 0:
        return StockStatus("in-stock", stock)
    return StockStatus("out-of-stock", OUT_OF_STOCK_LABEL)
