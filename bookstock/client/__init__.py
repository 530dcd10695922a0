"""
Client-side query composition for the catalogue page.

``QueryComposer`` debounces search input, issues listing and
recommendation requests through a transport, discards responses that
arrive after a newer request was issued, and sorts the loaded page
locally.
"""

from .composer import QueryComposer  # noqa: F401
from .transport import CatalogRequestError, HttpCatalogTransport  # noqa: F401
