"""GBM-based offline quote source that speaks the upstream text format."""

from __future__ import annotations

import logging
import math
import random

import numpy as np

from .interface import QuoteFetcher
from .seed_prices import (
    CROSS_MARKET_CORR,
    DEFAULT_PARAMS,
    SAME_MARKET_CORR,
    SEED_QUOTES,
    SYMBOL_PARAMS,
    UNKNOWN_PRICE_RANGE,
)

logger = logging.getLogger(__name__)


class GBMSimulator:
    """Geometric Brownian Motion simulator for correlated prices.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Each symbol keeps a fixed previous close (its seed) for the session, so
    change percentages drift naturally away from zero as steps accumulate.
    """

    # 242 trading days * 4 hours/day * 3600 seconds/hour (A-share session)
    TRADING_SECONDS_PER_YEAR = 242 * 4 * 3600  # 3,484,800

    def __init__(self, symbols: list[str], step_seconds: float = 3.0) -> None:
        self._dt = step_seconds / self.TRADING_SECONDS_PER_YEAR

        self._symbols: list[str] = []
        self._names: dict[str, str] = {}
        self._prices: dict[str, float] = {}
        self._closes: dict[str, float] = {}
        self._open: dict[str, float] = {}
        self._high: dict[str, float] = {}
        self._low: dict[str, float] = {}
        self._params: dict[str, dict[str, float]] = {}
        self._cholesky: np.ndarray | None = None

        for symbol in symbols:
            self._add_symbol_internal(symbol)
        self._rebuild_cholesky()

    def ensure_symbols(self, symbols: list[str]) -> None:
        """Start tracking any symbols not seen before."""
        added = False
        for symbol in symbols:
            if symbol not in self._prices:
                self._add_symbol_internal(symbol)
                added = True
        if added:
            self._rebuild_cholesky()

    def step(self) -> dict[str, float]:
        """Advance all symbols by one time step. Returns {symbol: new_price}."""
        n = len(self._symbols)
        if n == 0:
            return {}

        z = np.random.standard_normal(n)
        if self._cholesky is not None:
            z = self._cholesky @ z

        result: dict[str, float] = {}
        for i, symbol in enumerate(self._symbols):
            params = self._params[symbol]
            drift = (params["mu"] - 0.5 * params["sigma"] ** 2) * self._dt
            diffusion = params["sigma"] * math.sqrt(self._dt) * z[i]
            price = self._prices[symbol] * math.exp(drift + diffusion)

            self._prices[symbol] = price
            self._high[symbol] = max(self._high[symbol], price)
            self._low[symbol] = min(self._low[symbol], price)
            result[symbol] = round(price, 2)
        return result

    def render(self, symbols: list[str]) -> str:
        """Upstream-format lines: name,open,previous close,price,high,low."""
        lines = []
        for symbol in symbols:
            if symbol not in self._prices:
                lines.append(f'var hq_str_{symbol}="";')
                continue
            fields = [
                self._names[symbol],
                f"{self._open[symbol]:.2f}",
                f"{self._closes[symbol]:.2f}",
                f"{self._prices[symbol]:.2f}",
                f"{self._high[symbol]:.2f}",
                f"{self._low[symbol]:.2f}",
            ]
            lines.append(f'var hq_str_{symbol}="{",".join(fields)}";')
        return "\n".join(lines) + "\n"

    def _add_symbol_internal(self, symbol: str) -> None:
        if symbol in self._prices:
            return
        name, close = SEED_QUOTES.get(symbol, ("", random.uniform(*UNKNOWN_PRICE_RANGE)))
        self._symbols.append(symbol)
        self._names[symbol] = name
        self._closes[symbol] = close
        self._prices[symbol] = close
        self._open[symbol] = close
        self._high[symbol] = close
        self._low[symbol] = close
        self._params[symbol] = SYMBOL_PARAMS.get(symbol, dict(DEFAULT_PARAMS))

    def _rebuild_cholesky(self) -> None:
        """Rebuild the Cholesky factor of the correlation matrix. O(n^2), n is small."""
        n = len(self._symbols)
        if n <= 1:
            self._cholesky = None
            return

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = self._pairwise_correlation(self._symbols[i], self._symbols[j])
                corr[i, j] = rho
                corr[j, i] = rho
        self._cholesky = np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(s1: str, s2: str) -> float:
        """Symbols on the same exchange (shared prefix) move together."""
        return SAME_MARKET_CORR if s1[:2] == s2[:2] else CROSS_MARKET_CORR


class SimulatedQuoteFetcher(QuoteFetcher):
    """QuoteFetcher that never touches the network.

    Every fetch advances the simulation one step and renders the requested
    symbols in the same text format as the real endpoint, so the parser and
    cache paths are exercised exactly as in production.
    """

    def __init__(self, step_seconds: float = 3.0, max_batch_size: int = 50) -> None:
        self._sim = GBMSimulator(symbols=[], step_seconds=step_seconds)
        self.max_batch_size = max(1, max_batch_size)

    def fetch_batch(self, symbols: list[str]) -> str:
        batch = list(symbols)[: self.max_batch_size]
        if not batch:
            return ""
        self._sim.ensure_symbols(batch)
        self._sim.step()
        logger.debug("Simulated %d quotes", len(batch))
        return self._sim.render(batch)
