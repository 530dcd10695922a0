"""
Catalog package for the inventory catalogue API.

This package turns the CSV export of the inventory sheet into an
immutable in-memory snapshot and answers two kinds of read-only
requests against it: a filtered, searched and paginated listing, and a
uniform random sample of records with stock on hand. Snapshots are kept
in a ``SnapshotCache`` that refreshes them from the sheet according to
a freshness policy per query surface.
"""

from .router import router as catalog_router  # noqa: F401
