"""Factories for quote fetchers and the quote service."""

from __future__ import annotations

import logging
from functools import partial

from .interface import QuoteFetcher
from .service import QuoteService
from .settings import QuoteSettings
from .watchlist import WatchlistStore

logger = logging.getLogger(__name__)


def create_quote_fetcher(settings: QuoteSettings) -> QuoteFetcher:
    """Create the appropriate fetcher for the given settings.

    - settings.simulate → SimulatedQuoteFetcher (offline GBM data)
    - Otherwise → SinaQuoteFetcher (real upstream endpoint)
    """
    if settings.simulate:
        from .simulator import SimulatedQuoteFetcher

        logger.info("Quote source: GBM simulator")
        return SimulatedQuoteFetcher(
            step_seconds=settings.refresh_interval,
            max_batch_size=settings.max_batch_size,
        )

    from .sina_client import SinaQuoteFetcher

    logger.info("Quote source: %s", settings.base_url)
    return SinaQuoteFetcher(
        base_url=settings.base_url,
        timeout=settings.timeout,
        max_batch_size=settings.max_batch_size,
        encoding=settings.encoding,
        user_agent=settings.user_agent,
        referer=settings.referer,
    )


def create_quote_service(settings: QuoteSettings | None = None) -> QuoteService:
    """Wire the watch-list store, fetcher factory and service.

    Returns an unstarted service. Caller must await service.start().
    The fetcher is only built on start(), so nothing touches the network here.
    """
    settings = settings or QuoteSettings.from_env()
    return QuoteService(
        store=WatchlistStore(settings.watchlist_path),
        fetcher_factory=partial(create_quote_fetcher, settings),
        refresh_interval=settings.refresh_interval,
        max_batch_size=settings.max_batch_size,
    )
