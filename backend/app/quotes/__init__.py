"""Quote refresh cache for quotewatch.

Public API:
    Quote               - Immutable quote dataclass
    QuoteCache          - Thread-safe in-memory quote store
    QuoteFetcher        - Abstract interface for upstream providers
    QuoteService        - Watch-list + cache + refresh scheduler facade
    QuoteSettings       - QUOTES_* environment configuration
    WatchlistStore      - Persisted, de-duplicated watch-list
    normalize_symbol    - Canonical ``sh``/``sz`` symbol form
    parse_response      - Upstream text -> {symbol: Quote}
    create_quote_fetcher / create_quote_service - Factories
    create_quotes_router - FastAPI router factory for HTTP/SSE endpoints
"""

from .cache import QuoteCache
from .errors import QuoteError, QuoteFetchError, QuoteParseError
from .factory import create_quote_fetcher, create_quote_service
from .interface import QuoteFetcher
from .models import Quote
from .parser import parse_response
from .service import QuoteService, ServiceState
from .settings import QuoteSettings
from .stream import create_quotes_router
from .symbols import normalize_symbol, normalize_symbols
from .watchlist import DEFAULT_SYMBOLS, WatchlistStore

__all__ = [
    "DEFAULT_SYMBOLS",
    "Quote",
    "QuoteCache",
    "QuoteError",
    "QuoteFetchError",
    "QuoteFetcher",
    "QuoteParseError",
    "QuoteService",
    "QuoteSettings",
    "ServiceState",
    "WatchlistStore",
    "create_quote_fetcher",
    "create_quote_service",
    "create_quotes_router",
    "normalize_symbol",
    "normalize_symbols",
    "parse_response",
]
