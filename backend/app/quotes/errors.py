"""Exceptions raised inside a refresh cycle."""

from __future__ import annotations


class QuoteError(Exception):
    """Base class for recoverable refresh failures."""


class QuoteFetchError(QuoteError):
    """Transport failure: timeout, DNS/connection error or non-2xx status."""


class QuoteParseError(QuoteError):
    """Upstream payload did not yield a single usable quote line."""

    def __init__(self, message: str, excerpt: str = "") -> None:
        super().__init__(message)
        self.excerpt = excerpt
