"""Parser for the line-oriented ``var hq_str_<symbol>="...";`` quote format."""

from __future__ import annotations

import logging
import math
import re
import time

from .errors import QuoteParseError
from .models import Quote
from .symbols import normalize_symbol

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r'var\s+(?P<ident>[A-Za-z0-9_]+)\s*=\s*"(?P<payload>[^"]*)"')

# Position-indexed CSV layout
NAME_FIELD = 0
PREVIOUS_CLOSE_FIELD = 2
PRICE_FIELD = 3
MIN_FIELDS = 4

EXCERPT_LENGTH = 120


def parse_number(value: str) -> float:
    """Culture-invariant float parse. Anything unparseable becomes 0.0."""
    try:
        number = float(value.strip())
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    """Short single-line prefix of a payload for diagnostics."""
    flat = " ".join(text.split())
    return flat if len(flat) <= length else flat[:length] + "..."


def parse_line(ident: str, payload: str, timestamp: float) -> Quote | None:
    """Build a Quote from one assignment, or None if the line is unusable."""
    payload = payload.strip()
    if not payload:
        # Empty payload: unknown or suspended instrument
        return None

    symbol = normalize_symbol(ident.rsplit("_", 1)[-1])
    if symbol is None:
        return None

    fields = [part.strip() for part in payload.split(",")]
    if len(fields) < MIN_FIELDS:
        return None

    return Quote(
        symbol=symbol,
        name=fields[NAME_FIELD],
        price=parse_number(fields[PRICE_FIELD]),
        previous_close=parse_number(fields[PREVIOUS_CLOSE_FIELD]),
        timestamp=timestamp,
    )


def parse_response(text: str, timestamp: float | None = None) -> dict[str, Quote]:
    """Parse a raw upstream response into ``{symbol: Quote}``.

    Lines with an empty payload or fewer than four fields are skipped. Raises
    QuoteParseError when no line at all could be parsed, which usually means
    the upstream format changed or the request was blocked.
    """
    ts = timestamp or time.time()
    quotes: dict[str, Quote] = {}
    skipped = 0

    for match in _LINE_RE.finditer(text):
        quote = parse_line(match.group("ident"), match.group("payload"), ts)
        if quote is None:
            skipped += 1
            continue
        quotes[quote.symbol] = quote

    if not quotes:
        snippet = excerpt(text)
        raise QuoteParseError(f"no parseable quote lines in response: {snippet!r}", excerpt=snippet)

    logger.debug("Parsed %d quotes (%d lines skipped)", len(quotes), skipped)
    return quotes
