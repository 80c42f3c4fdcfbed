"""Thread-safe in-memory quote cache."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from threading import Lock

from .models import Quote


class QuoteCache:
    """Thread-safe in-memory cache of the latest Quote for each symbol.

    Writer: QuoteService refresh cycles (merge) and watch-list edits (retain).
    Readers: snapshot retrieval, HTTP endpoints, SSE stream.

    Entries survive failed refresh cycles; they are only dropped when their
    symbol leaves the watch-list.
    """

    def __init__(self) -> None:
        self._quotes: dict[str, Quote] = {}
        self._lock = Lock()

    def merge(self, quotes: Mapping[str, Quote]) -> int:
        """Merge parsed quotes. Symbols not in ``quotes`` keep their cached value.

        Returns the number of entries written.
        """
        if not quotes:
            return 0
        with self._lock:
            self._quotes.update(quotes)
            return len(quotes)

    def retain(self, symbols: Iterable[str]) -> list[str]:
        """Drop every entry whose symbol is not in ``symbols``. Returns the removed symbols."""
        keep = set(symbols)
        with self._lock:
            removed = [s for s in self._quotes if s not in keep]
            for symbol in removed:
                del self._quotes[symbol]
            return removed

    def get(self, symbol: str) -> Quote | None:
        """Get the latest quote for a single symbol, or None if unknown."""
        with self._lock:
            return self._quotes.get(symbol)

    def get_many(self, symbols: Iterable[str]) -> list[Quote]:
        """Cached quotes for ``symbols`` in the given order; unknown symbols are omitted."""
        with self._lock:
            return [self._quotes[s] for s in symbols if s in self._quotes]

    def __len__(self) -> int:
        with self._lock:
            return len(self._quotes)
