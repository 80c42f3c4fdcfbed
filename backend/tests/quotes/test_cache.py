"""Tests for QuoteCache."""

from app.quotes.cache import QuoteCache
from app.quotes.models import Quote


def _quote(symbol: str, price: float = 10.0, previous_close: float = 9.5) -> Quote:
    return Quote(symbol=symbol, name=symbol.upper(), price=price, previous_close=previous_close)


def _cache(*quotes: Quote) -> QuoteCache:
    cache = QuoteCache()
    cache.merge({q.symbol: q for q in quotes})
    return cache


class TestQuoteCache:
    """Unit tests for the QuoteCache."""

    def test_merge_and_get(self):
        quote = _quote("sh600519", 1600.0)
        cache = QuoteCache()
        assert cache.merge({"sh600519": quote}) == 1
        assert cache.get("sh600519") == quote

    def test_get_unknown(self):
        cache = QuoteCache()
        assert cache.get("sh600519") is None

    def test_merge_only_touches_given_symbols(self):
        """Symbols absent from a response keep their previous quote."""
        old_b = _quote("sz000001", 11.0)
        cache = _cache(_quote("sh600519", 1600.0), old_b)

        written = cache.merge({"sh600519": _quote("sh600519", 1610.0)})

        assert written == 1
        assert cache.get("sh600519").price == 1610.0
        assert cache.get("sz000001") == old_b

    def test_merge_empty_is_noop(self):
        cache = _cache(_quote("sh600519"))
        assert cache.merge({}) == 0
        assert len(cache) == 1

    def test_retain_prunes_removed_symbols(self):
        cache = _cache(_quote("sh600000"), _quote("sh600519"), _quote("sz000001"))

        removed = cache.retain(["sh600000", "sz000001"])

        assert removed == ["sh600519"]
        assert cache.get("sh600519") is None
        assert len(cache) == 2

    def test_retain_nothing_to_remove(self):
        cache = _cache(_quote("sh600000"))
        assert cache.retain(["sh600000", "sz000001"]) == []
        assert len(cache) == 1

    def test_get_many_in_requested_order_omits_unknown(self):
        cache = _cache(_quote("sh600000"), _quote("sz000001"))
        rows = cache.get_many(["sz000001", "sh600519", "sh600000"])
        assert [q.symbol for q in rows] == ["sz000001", "sh600000"]

    def test_len(self):
        cache = QuoteCache()
        assert len(cache) == 0
        cache.merge({"sh600000": _quote("sh600000")})
        assert len(cache) == 1
