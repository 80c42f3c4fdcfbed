"""Ordered, de-duplicated watch-list with plain-text persistence."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .settings import default_watchlist_path
from .symbols import normalize_symbols, split_symbols

logger = logging.getLogger(__name__)

# Major indices. Index codes break the leading-digit market rule, so the
# market prefix is explicit.
DEFAULT_SYMBOLS: tuple[str, ...] = (
    "sh000001",  # SSE Composite
    "sz399001",  # SZSE Component
    "sz399006",  # ChiNext
    "sh000300",  # CSI 300
)


class WatchlistStore:
    """Watch-list of canonical symbols backed by a text file.

    The file holds one symbol per line but the loader accepts anything a
    person might type: commas, semicolons or whitespace (half- or full-width),
    in any symbol convention the normalizer understands.

    Not synchronized on its own; QuoteService guards it with its structural lock.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        defaults: Iterable[str] = DEFAULT_SYMBOLS,
    ) -> None:
        self._path = Path(path) if path is not None else default_watchlist_path()
        self._defaults = normalize_symbols(defaults)
        self._symbols: list[str] = []
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get_symbols(self) -> list[str]:
        """Defensive copy in stored order."""
        return list(self._symbols)

    def set_symbols(self, raw_symbols: Iterable[str], persist: bool = True) -> list[str]:
        """Normalize, de-duplicate and replace. Returns the new list.

        With ``persist=False`` only the in-memory list changes; the caller is
        expected to ``save()`` later.
        """
        self._symbols = normalize_symbols(raw_symbols)
        self._loaded = True
        if persist:
            self.save()
        return list(self._symbols)

    def load(self) -> list[str]:
        """Read the watch-list file.

        A missing file seeds the defaults and writes them immediately. An
        existing empty file is an explicitly empty watch-list.
        """
        try:
            text = self._path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            logger.info("No watch-list at %s, seeding %d defaults", self._path, len(self._defaults))
            self._symbols = list(self._defaults)
            self._loaded = True
            self.save()
            return list(self._symbols)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read watch-list %s: %s; using defaults", self._path, e)
            self._symbols = list(self._defaults)
            self._loaded = True
            return list(self._symbols)

        self._symbols = normalize_symbols(split_symbols(text))
        self._loaded = True
        logger.info("Loaded %d symbols from %s", len(self._symbols), self._path)
        return list(self._symbols)

    def save(self) -> bool:
        """Write one symbol per line. Failures are logged, never raised."""
        tmp = self._path.with_name(self._path.name + ".tmp")
        content = "".join(f"{symbol}\n" for symbol in self._symbols)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.warning("Could not save watch-list to %s: %s", self._path, e)
            return False
        return True
