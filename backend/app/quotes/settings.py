"""Runtime configuration read from QUOTES_* environment variables."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://hq.sinajs.cn/list="
DEFAULT_REFERER = "https://finance.sina.com.cn/"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
DEFAULT_ENCODING = "gb18030"  # Superset of GB2312/GBK
WATCHLIST_FILENAME = "quotewatch_symbols.txt"

MIN_REFRESH_INTERVAL = 0.5
MAX_REFRESH_INTERVAL = 60.0


def default_watchlist_path() -> Path:
    return Path(tempfile.gettempdir()) / WATCHLIST_FILENAME


def clamp_interval(seconds: float) -> float:
    """Keep the refresh period within [0.5s, 60s]."""
    return max(MIN_REFRESH_INTERVAL, min(MAX_REFRESH_INTERVAL, float(seconds)))


@dataclass(frozen=True, slots=True)
class QuoteSettings:
    base_url: str = DEFAULT_BASE_URL
    referer: str = DEFAULT_REFERER
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 5.0
    refresh_interval: float = 3.0
    max_batch_size: int = 50
    encoding: str = DEFAULT_ENCODING
    watchlist_path: Path = field(default_factory=default_watchlist_path)
    simulate: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> QuoteSettings:
        """Build settings from the environment. Malformed numbers keep their defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        path = env.get("QUOTES_WATCHLIST_PATH", "").strip()
        return cls(
            base_url=env.get("QUOTES_BASE_URL", "").strip() or defaults.base_url,
            referer=env.get("QUOTES_REFERER", "").strip() or defaults.referer,
            user_agent=env.get("QUOTES_USER_AGENT", "").strip() or defaults.user_agent,
            timeout=_env_number(env, "QUOTES_TIMEOUT", defaults.timeout, float),
            refresh_interval=clamp_interval(
                _env_number(env, "QUOTES_REFRESH_INTERVAL", defaults.refresh_interval, float)
            ),
            max_batch_size=max(1, _env_number(env, "QUOTES_MAX_BATCH_SIZE", defaults.max_batch_size, int)),
            encoding=env.get("QUOTES_ENCODING", "").strip() or defaults.encoding,
            watchlist_path=Path(path) if path else defaults.watchlist_path,
            simulate=env.get("QUOTES_SIMULATE", "").strip().lower() in ("1", "true", "yes", "on"),
        )


def _env_number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using %s", key, raw, default)
        return default
