"""Error hierarchy for the catalog client."""
from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base for all catalog errors."""


class NetworkError(CatalogError):
    """Request failed or the server answered with a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ParseError(CatalogError):
    """Response body is not valid JSON."""


class FetchTimeoutError(CatalogError, TimeoutError):
    """The remote source did not answer within the configured timeout."""
