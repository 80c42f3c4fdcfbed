"""Symbol normalization for Shanghai/Shenzhen instrument codes."""

from __future__ import annotations

import re
from collections.abc import Iterable

MARKET_SH = "sh"
MARKET_SZ = "sz"
MARKETS = (MARKET_SH, MARKET_SZ)

# Alternate "secid" convention: 1.600000 -> Shanghai, 0.000001 -> Shenzhen
_SECID_MARKETS = {"1": MARKET_SH, "0": MARKET_SZ}

# Leading digit of a bare code -> market. Indices do not follow this rule.
_SH_LEADING_DIGITS = frozenset("569")

# Half-width and full-width separators accepted in hand-edited lists
_SEPARATORS_RE = re.compile(r"[,，;；、\s]+")


def normalize_symbol(raw: str | None) -> str | None:
    """Map a user-typed symbol to canonical ``<market><digits>`` form.

    Accepts ``sh600000``, ``SH600000``, ``1.600000``, ``600000.SH`` and the
    bare ``600000``. Returns None when no digits remain after the market
    marker is consumed.
    """
    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return None

    market: str | None = None
    if text[:2] in MARKETS:
        market = text[:2]
        text = text[2:]
    elif len(text) > 2 and text[1] == "." and text[0] in _SECID_MARKETS:
        market = _SECID_MARKETS[text[0]]
        text = text[2:]
    elif len(text) > 3 and text[-3] == "." and text[-2:] in MARKETS:
        market = text[-2:]
        text = text[:-3]

    digits = "".join(ch for ch in text if ch.isdigit())
    if not digits:
        return None

    if market is None:
        market = MARKET_SH if digits[0] in _SH_LEADING_DIGITS else MARKET_SZ
    return market + digits


def split_symbols(text: str) -> list[str]:
    """Split a hand-typed list on commas, semicolons or whitespace."""
    return [token for token in _SEPARATORS_RE.split(text) if token]


def normalize_symbols(raw_symbols: Iterable[str]) -> list[str]:
    """Normalize, drop invalid entries and de-duplicate, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in raw_symbols:
        symbol = normalize_symbol(raw)
        if symbol is None or symbol in seen:
            continue
        seen.add(symbol)
        result.append(symbol)
    return result
