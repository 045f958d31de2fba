"""Exception hierarchy for the price table converter."""

from typing import Optional


class PriceTableError(Exception):
    """Base class for every fatal converter error."""


class FetchError(PriceTableError):
    """An upstream catalog could not be retrieved (HTTP or network failure)."""

    def __init__(self, message: str, label: Optional[str] = None, url: Optional[str] = None):
        self.label = label
        self.url = url
        super().__init__(message)


class ParseError(PriceTableError):
    """An input document does not have the expected top-level structure."""


class WriteError(PriceTableError):
    """The output file could not be written."""
