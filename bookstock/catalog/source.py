"""
Upstream access to the inventory sheet.

The sheet is fetched as CSV over plain HTTPS with ``urllib``. Unlike a
best-effort lookup, a failed fetch is never turned into an empty
result: a non-2xx status or a transport error raises
``UpstreamFetchError`` and the caller decides what to do.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Callable, Optional

from .. import config
from .errors import UpstreamFetchError
from .normalizer import parse_records
from .schemas import Snapshot

logger = logging.getLogger(__name__)

Fetcher = Callable[[], str]


def fetch_csv(url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Download the CSV export and return it as text.

    Raises
    ------
    UpstreamFetchError
        On a non-2xx status or any network level failure.
    """
    url = url or config.CSV_URL
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": f"{config.APP_NAME}/{config.APP_VERSION}",
            "Accept": "text/csv",
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout or config.FETCH_TIMEOUT) as response:
            if response.status < 200 or response.status >= 300:
                logger.error("Failed to fetch inventory sheet: %s %s", response.status, response.reason)
                raise UpstreamFetchError(details=f"{response.status} {response.reason}")
            text = response.read().decode("utf-8-sig", errors="replace")
    except urllib.error.HTTPError as exc:
        logger.error("Failed to fetch inventory sheet: %s %s", exc.code, exc.reason)
        raise UpstreamFetchError(details=f"{exc.code} {exc.reason}") from exc
    except (urllib.error.URLError, OSError) as exc:
        logger.error("Error fetching %s: %s", url, exc)
        raise UpstreamFetchError(details=str(exc)) from exc
    logger.info("CSV data length: %d", len(text))
    return text


def load_snapshot(fetch: Fetcher = fetch_csv) -> Snapshot:
    """Fetch and normalize one complete snapshot.

    The timestamp is taken before the fetch starts. Either a whole
    snapshot is returned or an exception propagates.
    """
    fetched_at = datetime.now(timezone.utc)
    records = parse_records(fetch())
    return Snapshot(records=tuple(records), fetched_at=fetched_at)
