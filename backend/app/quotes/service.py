"""QuoteService: watch-list, quote cache and the refresh scheduler behind one facade."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from threading import Lock

from .cache import QuoteCache
from .errors import QuoteError
from .events import ChangeHandler, ChangeNotifier
from .interface import QuoteFetcher
from .models import Quote
from .parser import parse_response
from .settings import clamp_interval
from .symbols import normalize_symbol, split_symbols
from .watchlist import WatchlistStore

logger = logging.getLogger(__name__)

NO_SYMBOLS_ERROR = "no symbols configured"
NO_QUOTES_ERROR = "no quotes returned for the watch-list"


class ServiceState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    IDLE = "idle"
    REFRESHING = "refreshing"


def _batches(symbols: list[str], size: int) -> list[list[str]]:
    return [symbols[i : i + size] for i in range(0, len(symbols), size)]


class QuoteService:
    """Keeps a watch-list of symbols and a cache of their latest quotes fresh.

    One instance is built at application start-up and handed to every
    consumer. Lifecycle:

        service = create_quote_service(settings)
        await service.start()          # loads watch-list, first refresh, arms loop
        service.subscribe(on_change)   # fired after every cycle and every edit
        rows = service.get_snapshot()  # quotes in watch-list order
        await service.stop()           # disarms loop, drains cycle, closes fetcher

    Locking:
        ``_lock`` guards the watch-list and the cache together and is never
        held across network or file I/O. ``_persist_lock`` serializes
        watch-list file reads and writes and is always taken before
        ``_lock``. ``_cycle_gate`` is a non-blocking test-and-set so at most
        one refresh cycle runs; a tick that finds it taken is dropped, not
        queued. Cycles run as their own tasks and are shielded, so
        ``stop()`` waits for an in-flight request instead of abandoning it.

    Snapshot policy:
        Symbols with no cached quote yet are omitted from ``get_snapshot()``.
    """

    def __init__(
        self,
        store: WatchlistStore,
        fetcher_factory: Callable[[], QuoteFetcher],
        cache: QuoteCache | None = None,
        refresh_interval: float = 3.0,
        max_batch_size: int = 50,
    ) -> None:
        self._store = store
        self._fetcher_factory = fetcher_factory
        self._cache = cache if cache is not None else QuoteCache()
        self._interval = refresh_interval
        self._max_batch_size = max(1, max_batch_size)
        self._notifier = ChangeNotifier()

        self._lock = Lock()
        self._persist_lock = Lock()
        self._cycle_gate = Lock()

        self._state = ServiceState.STOPPED
        self._fetcher: QuoteFetcher | None = None
        self._task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: set[asyncio.Task] = set()

        self._last_update: datetime | None = None
        self._last_error: str | None = None
        self._version: int = 0  # Bumped on every notification

    # --- Lifecycle ---

    async def start(self) -> None:
        """Load the watch-list, run one refresh immediately, then arm the loop.

        Idempotent: a second call while running is a no-op.
        """
        if self._state is not ServiceState.STOPPED:
            return
        self._state = ServiceState.STARTING
        self._loop = asyncio.get_running_loop()

        try:
            with self._persist_lock:
                if not self._store.loaded:
                    self._store.load()
            with self._lock:
                self._cache.retain(self._store.get_symbols())
            self._fetcher = self._fetcher_factory()
        except Exception:
            self._state = ServiceState.STOPPED
            self._loop = None
            raise
        self._state = ServiceState.IDLE

        await asyncio.shield(self._spawn_refresh("quote-refresh-initial"))

        # stop() may have run while the first cycle was in flight
        if self._fetcher is None:
            return
        self._task = asyncio.create_task(self._run_loop(), name="quote-refresh")
        logger.info(
            "Quote service started: %d symbols, %.1fs interval",
            len(self.get_symbols()),
            self._interval,
        )

    async def stop(self) -> None:
        """Disarm the refresh loop, wait for an in-flight cycle, release the fetcher.

        Safe to call repeatedly.
        """
        was_running = self._state is not ServiceState.STOPPED
        # New cycles bail out once the fetcher is gone; in-flight ones hold their own reference
        fetcher, self._fetcher = self._fetcher, None

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        pending = list(self._pending)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if fetcher is not None:
            fetcher.close()

        self._state = ServiceState.STOPPED
        self._loop = None
        if was_running:
            logger.info("Quote service stopped")

    async def force_refresh(self) -> bool:
        """Run one out-of-band cycle through the same in-flight guard.

        Returns False when the service is stopped or a cycle is already running.
        """
        if self._fetcher is None:
            return False
        return await asyncio.shield(self._spawn_refresh("quote-refresh-forced"))

    def set_refresh_interval(self, seconds: float) -> float:
        """Change the loop period, clamped to [0.5s, 60s]. Applies from the next sleep."""
        self._interval = clamp_interval(seconds)
        return self._interval

    # --- Watch-list ---

    def set_symbols(self, raw_symbols: Iterable[str] | str) -> list[str]:
        """Replace the watch-list. Callable from any thread.

        Prunes cached quotes for symbols that left the list, persists it,
        notifies subscribers and, when running, schedules a refresh.
        """
        if isinstance(raw_symbols, str):
            raw_symbols = split_symbols(raw_symbols)

        with self._persist_lock:
            with self._lock:
                symbols = self._store.set_symbols(raw_symbols, persist=False)
                removed = self._cache.retain(symbols)
            self._store.save()

        logger.info("Watch-list set to %d symbols (%d pruned)", len(symbols), len(removed))
        self._publish()
        self._schedule_refresh()
        return symbols

    def get_symbols(self) -> list[str]:
        with self._lock:
            return self._store.get_symbols()

    # --- Reads ---

    def get_snapshot(self) -> list[Quote]:
        """Cached quotes in watch-list order. Never blocks on network or file I/O."""
        with self._lock:
            return self._cache.get_many(self._store.get_symbols())

    def get_quote(self, raw_symbol: str) -> Quote | None:
        symbol = normalize_symbol(raw_symbol)
        if symbol is None:
            return None
        with self._lock:
            return self._cache.get(symbol)

    @property
    def last_update(self) -> datetime | None:
        """Time of the last cycle that merged at least one quote."""
        with self._lock:
            return self._last_update

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def refresh_interval(self) -> float:
        return self._interval

    @property
    def version(self) -> int:
        """Notification counter. Useful for SSE change detection."""
        return self._version

    @property
    def cache(self) -> QuoteCache:
        return self._cache

    def status_text(self) -> str:
        """One-line status: when data was last refreshed and why it may be stale."""
        last_update = self.last_update
        error = self.last_error
        if last_update is None:
            return f"not updated: {error}" if error else "not updated"
        text = f"updated {last_update:%H:%M:%S}"
        return f"{text} ({error})" if error else text

    # --- Notification ---

    def subscribe(self, handler: ChangeHandler) -> None:
        self._notifier.subscribe(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        self._notifier.unsubscribe(handler)

    def _publish(self) -> None:
        with self._lock:
            self._version += 1
        self._notifier.publish()

    # --- Refresh cycle ---

    async def _run_loop(self) -> None:
        """Refresh on interval. First refresh already happened in start()."""
        while True:
            await asyncio.sleep(self._interval)
            try:
                await asyncio.shield(self._spawn_refresh("quote-refresh-cycle"))
            except Exception:
                logger.exception("Refresh loop iteration failed")

    async def _refresh_once(self) -> bool:
        fetcher = self._fetcher
        if fetcher is None:
            return False
        if not self._cycle_gate.acquire(blocking=False):
            logger.debug("Refresh already in flight, dropping tick")
            return False
        try:
            self._state = ServiceState.REFRESHING
            await self._run_cycle(fetcher)
        finally:
            if self._fetcher is not None:
                self._state = ServiceState.IDLE
            self._cycle_gate.release()
        self._publish()
        return True

    async def _run_cycle(self, fetcher: QuoteFetcher) -> None:
        """Fetch, parse and merge. Every failure ends up in ``last_error``."""
        with self._lock:
            symbols = self._store.get_symbols()

        if not symbols:
            with self._lock:
                self._last_error = NO_SYMBOLS_ERROR
            logger.debug("Refresh skipped: %s", NO_SYMBOLS_ERROR)
            return

        merged = 0
        failure: str | None = None
        for batch in _batches(symbols, self._max_batch_size):
            try:
                # Fetchers are synchronous; keep the event loop free
                text = await asyncio.to_thread(fetcher.fetch_batch, batch)
                quotes = parse_response(text)
            except QuoteError as e:
                failure = str(e)
                logger.warning("Refresh of %d symbols failed: %s", len(batch), e)
                continue
            except Exception as e:
                failure = f"{type(e).__name__}: {e}"
                logger.exception("Unexpected error refreshing %d symbols", len(batch))
                continue
            merged += self._merge(quotes)

        with self._lock:
            if merged:
                self._last_update = datetime.now()
                self._last_error = None
            else:
                self._last_error = failure or NO_QUOTES_ERROR
        logger.debug("Refresh cycle merged %d/%d symbols", merged, len(symbols))

    def _merge(self, quotes: dict[str, Quote]) -> int:
        # The watch-list may have changed while the request was in flight
        with self._lock:
            wanted = set(self._store.get_symbols())
            return self._cache.merge({s: q for s, q in quotes.items() if s in wanted})

    def _spawn_refresh(self, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._refresh_once(), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _schedule_refresh(self) -> None:
        loop = self._loop
        if loop is None or self._fetcher is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self._spawn_refresh("quote-refresh-forced")
        else:
            loop.call_soon_threadsafe(self._spawn_refresh, "quote-refresh-forced")
