"""Error taxonomy for the catalogue service.

Every error carries the HTTP status it maps to and a message that is
safe to show to a user. ``details`` holds optional diagnostic text.
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    status_code = 500
    default_message = "Unknown error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidParameter(CatalogError):
    """Malformed query input. Raised before any filtering happens."""

    status_code = 400
    default_message = "Invalid pagination parameters"


class UpstreamFetchError(CatalogError):
    """The inventory sheet was unreachable or answered with a non-2xx status."""

    default_message = "Failed to fetch sheet"


class ParseError(CatalogError):
    """The sheet answered but its payload is not a usable table."""

    default_message = "Failed to parse inventory sheet"
