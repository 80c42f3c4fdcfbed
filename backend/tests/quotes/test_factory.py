"""Tests for quote fetcher/service factories."""

import os
from unittest.mock import patch

from app.quotes.factory import create_quote_fetcher, create_quote_service
from app.quotes.service import QuoteService, ServiceState
from app.quotes.settings import QuoteSettings
from app.quotes.simulator import SimulatedQuoteFetcher
from app.quotes.sina_client import SinaQuoteFetcher


class TestFactory:
    """Tests for create_quote_fetcher and create_quote_service."""

    def test_creates_sina_by_default(self):
        source = create_quote_fetcher(QuoteSettings())
        assert isinstance(source, SinaQuoteFetcher)

    def test_creates_simulator_when_requested(self):
        source = create_quote_fetcher(QuoteSettings(simulate=True))
        assert isinstance(source, SimulatedQuoteFetcher)

    def test_sina_receives_settings(self):
        settings = QuoteSettings(
            base_url="https://mirror.test/list=",
            timeout=2.0,
            max_batch_size=10,
            encoding="gbk",
            user_agent="UA",
            referer="https://ref.test/",
        )
        source = create_quote_fetcher(settings)

        assert isinstance(source, SinaQuoteFetcher)
        assert source.base_url == "https://mirror.test/list="
        assert source.timeout == 2.0
        assert source.max_batch_size == 10
        assert source.encoding == "gbk"
        assert source.headers == {"User-Agent": "UA", "Referer": "https://ref.test/"}

    def test_simulator_receives_batch_size(self):
        source = create_quote_fetcher(QuoteSettings(simulate=True, max_batch_size=7))
        assert source.max_batch_size == 7

    def test_service_is_unstarted_and_uses_watchlist_path(self, tmp_path):
        path = tmp_path / "w.txt"
        service = create_quote_service(QuoteSettings(watchlist_path=path, refresh_interval=9.0))

        assert isinstance(service, QuoteService)
        assert service.state is ServiceState.STOPPED
        assert service.refresh_interval == 9.0
        assert service._store.path == path
        assert not path.exists()  # Nothing loaded until start()

    def test_service_reads_env_when_no_settings(self, tmp_path):
        env = {"QUOTES_WATCHLIST_PATH": str(tmp_path / "env.txt"), "QUOTES_SIMULATE": "1"}
        with patch.dict(os.environ, env, clear=True):
            service = create_quote_service()

        assert service._store.path == tmp_path / "env.txt"
        assert isinstance(service._fetcher_factory(), SimulatedQuoteFetcher)
