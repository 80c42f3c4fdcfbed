"""Abstract interface for quote fetchers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class QuoteFetcher(ABC):
    """Contract for upstream quote providers.

    A fetcher performs exactly one request per call and returns the decoded
    response text. It never touches the QuoteCache; parsing and merging are
    the QuoteService's job. Calls are synchronous and run in a worker thread.

    Lifecycle:
        fetcher = create_quote_fetcher(settings)
        text = fetcher.fetch_batch(["sh600000", "sz000001"])
        # ... later, when the service stops ...
        fetcher.close()
    """

    max_batch_size: int = 50

    @abstractmethod
    def fetch_batch(self, symbols: list[str]) -> str:
        """Fetch raw quote text for up to ``max_batch_size`` canonical symbols.

        Raises QuoteFetchError on timeout or transport failure. No retry is
        attempted; the next scheduler tick is the retry.
        """

    def close(self) -> None:
        """Release network resources. Safe to call multiple times."""
