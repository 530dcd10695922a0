"""
Runtime configuration for the inventory catalogue service.

Values are read once at import time from the environment. A local
``.env`` file is honoured so that development setups can point the
service at a private copy of the inventory sheet without exporting
variables by hand.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

APP_NAME = "Bookstock Inventory Catalogue"
APP_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Upstream inventory sheet
#
# The inventory lives in a publicly shared spreadsheet. Its CSV export is
# the only data source; the service never writes back to it.
# ---------------------------------------------------------------------------

SHEET_ID = os.getenv(
    "BOOKSTOCK_SHEET_ID", "1XGe0tR99pjc2ZkZqvJpTAGN5cOPUinEpv-pBqaa7I7U"
).strip()

CSV_URL = (
    os.getenv("BOOKSTOCK_CSV_URL", "").strip()
    or f"https://docs.google.com/spreadsheets/d/{SHEET_ID}/export?format=csv"
)

FETCH_TIMEOUT = float(os.getenv("BOOKSTOCK_FETCH_TIMEOUT", "10"))

# ---------------------------------------------------------------------------
# Query defaults
# ---------------------------------------------------------------------------

DEFAULT_LIMIT = int(os.getenv("BOOKSTOCK_DEFAULT_LIMIT", "20"))
MAX_LIMIT = 1000

DEFAULT_SAMPLE_COUNT = 5
MAX_SAMPLE_COUNT = 20

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("BOOKSTOCK_LOG_LEVEL", "INFO").strip().upper() or "INFO"
