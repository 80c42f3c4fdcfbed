"""Sina hq.sinajs.cn quote fetcher."""

from __future__ import annotations

import codecs
import logging
from typing import Any

import requests

from .errors import QuoteFetchError
from .interface import QuoteFetcher
from .settings import (
    DEFAULT_BASE_URL,
    DEFAULT_ENCODING,
    DEFAULT_REFERER,
    DEFAULT_USER_AGENT,
)

logger = logging.getLogger(__name__)


def decode_payload(raw: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode an upstream body. Never raises on malformed bytes.

    Strict decode with the upstream code page first, then the same code page
    with replacement characters. An unknown codec name falls back to UTF-8.
    """
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.warning("Unknown encoding %r, decoding as utf-8", encoding)
        return raw.decode("utf-8", errors="replace")

    try:
        return raw.decode(encoding)
    except UnicodeDecodeError:
        logger.debug("Strict %s decode failed, replacing malformed bytes", encoding)
        return raw.decode(encoding, errors="replace")


class SinaQuoteFetcher(QuoteFetcher):
    """QuoteFetcher backed by the Sina realtime quote endpoint.

    One GET per call: ``<base_url>sh600000,sz000001,...``. The endpoint
    rejects requests without a browser User-Agent and a finance.sina.com.cn
    Referer, and answers in a GB-family code page.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        max_batch_size: int = 50,
        encoding: str = DEFAULT_ENCODING,
        user_agent: str = DEFAULT_USER_AGENT,
        referer: str = DEFAULT_REFERER,
        session: Any | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.max_batch_size = max(1, max_batch_size)
        self.encoding = encoding
        self.headers = {"User-Agent": user_agent, "Referer": referer}
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> Any:
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self._session

    def build_url(self, symbols: list[str]) -> str:
        return self.base_url + ",".join(symbols)

    def fetch_batch(self, symbols: list[str]) -> str:
        if not symbols:
            return ""

        batch = list(symbols)
        if len(batch) > self.max_batch_size:
            logger.warning(
                "Batch of %d symbols exceeds max %d; fetching the first %d only",
                len(batch),
                self.max_batch_size,
                self.max_batch_size,
            )
            batch = batch[: self.max_batch_size]

        url = self.build_url(batch)
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise QuoteFetchError(f"request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise QuoteFetchError(f"request failed: {e}") from e

        text = decode_payload(response.content, self.encoding)
        logger.debug("Fetched %d symbols, %d bytes", len(batch), len(response.content))
        return text

    def close(self) -> None:
        if self._session is not None and self._owns_session:
            self._session.close()
        self._session = None
