"""Pytest configuration and fixtures."""

import threading

import pytest

from app.quotes.interface import QuoteFetcher
from app.quotes.watchlist import WatchlistStore


def quote_line(symbol: str, name: str = "", previous_close: float = 10.0, price: float = 10.5) -> str:
    """One upstream-format line: name,open,previous close,price,high,low."""
    name = name or f"Name {symbol}"
    return (
        f'var hq_str_{symbol}="{name},{previous_close:.2f},{previous_close:.2f},'
        f'{price:.2f},{price:.2f},{previous_close:.2f}";'
    )


class FakeFetcher(QuoteFetcher):
    """In-memory QuoteFetcher that records calls.

    ``text`` is either a fixed response or a callable taking the symbol batch.
    Clearing ``gate`` makes fetch_batch block until it is set again.
    """

    def __init__(self, text=None, error: Exception | None = None) -> None:
        self.text = text if text is not None else self.default_text
        self.error = error
        self.calls: list[list[str]] = []
        self.gate = threading.Event()
        self.gate.set()
        self.closed = False

    @staticmethod
    def default_text(symbols: list[str]) -> str:
        return "\n".join(quote_line(s) for s in symbols)

    def fetch_batch(self, symbols: list[str]) -> str:
        self.calls.append(list(symbols))
        self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.text(symbols) if callable(self.text) else self.text

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def fake_fetcher_cls():
    return FakeFetcher


@pytest.fixture
def watchlist_path(tmp_path):
    return tmp_path / "symbols.txt"


@pytest.fixture
def store(watchlist_path) -> WatchlistStore:
    return WatchlistStore(watchlist_path)


@pytest.fixture
def make_line():
    return quote_line
