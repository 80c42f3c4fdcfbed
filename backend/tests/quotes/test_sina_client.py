"""Tests for SinaQuoteFetcher (mocked session)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from app.quotes.errors import QuoteFetchError
from app.quotes.sina_client import SinaQuoteFetcher, decode_payload

BODY = 'var hq_str_sh600519="贵州茅台,1600.00,1595.00,1600.00";\n'


def _make_session(body: bytes = BODY.encode("gb18030")) -> MagicMock:
    session = MagicMock()
    response = MagicMock()
    response.content = body
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session


class TestSinaQuoteFetcher:
    def test_request_contract(self):
        session = _make_session()
        fetcher = SinaQuoteFetcher(
            base_url="https://example.test/list=",
            timeout=4.0,
            user_agent="UA/1.0",
            referer="https://finance.example.test/",
            session=session,
        )

        text = fetcher.fetch_batch(["sh600519", "sz000001"])

        session.get.assert_called_once_with(
            "https://example.test/list=sh600519,sz000001",
            headers={"User-Agent": "UA/1.0", "Referer": "https://finance.example.test/"},
            timeout=4.0,
        )
        assert text == BODY

    def test_decodes_legacy_code_page(self):
        fetcher = SinaQuoteFetcher(session=_make_session())
        assert "贵州茅台" in fetcher.fetch_batch(["sh600519"])

    def test_batch_truncated_to_max(self):
        session = _make_session()
        fetcher = SinaQuoteFetcher(base_url="u=", max_batch_size=2, session=session)

        fetcher.fetch_batch(["sh600000", "sh600519", "sz000001"])

        url = session.get.call_args.args[0]
        assert url == "u=sh600000,sh600519"

    def test_empty_batch_skips_request(self):
        session = _make_session()
        fetcher = SinaQuoteFetcher(session=session)

        assert fetcher.fetch_batch([]) == ""
        session.get.assert_not_called()

    def test_timeout_raises_fetch_error(self):
        session = _make_session()
        session.get.side_effect = requests.Timeout("read timed out")
        fetcher = SinaQuoteFetcher(timeout=1.5, session=session)

        with pytest.raises(QuoteFetchError, match="timed out"):
            fetcher.fetch_batch(["sh600519"])
        assert session.get.call_count == 1  # No retry

    def test_connection_error_raises_fetch_error(self):
        session = _make_session()
        session.get.side_effect = requests.ConnectionError("dns failure")
        fetcher = SinaQuoteFetcher(session=session)

        with pytest.raises(QuoteFetchError, match="dns failure"):
            fetcher.fetch_batch(["sh600519"])

    def test_http_status_raises_fetch_error(self):
        session = _make_session()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("403 Forbidden")
        fetcher = SinaQuoteFetcher(session=session)

        with pytest.raises(QuoteFetchError, match="403"):
            fetcher.fetch_batch(["sh600519"])

    def test_close_leaves_injected_session_open(self):
        session = _make_session()
        fetcher = SinaQuoteFetcher(session=session)

        fetcher.close()
        fetcher.close()

        session.close.assert_not_called()

    def test_owned_session_created_lazily_and_closed(self):
        with patch("app.quotes.sina_client.requests.Session") as session_cls:
            fetcher = SinaQuoteFetcher()
            session_cls.assert_not_called()

            assert fetcher.session is session_cls.return_value
            session_cls.assert_called_once()

            fetcher.close()
            session_cls.return_value.close.assert_called_once()


class TestDecodePayload:
    def test_gb18030(self):
        assert decode_payload("上证指数".encode("gb18030")) == "上证指数"

    def test_gb2312_bytes_decode(self):
        assert decode_payload("平安银行".encode("gb2312")) == "平安银行"

    def test_malformed_bytes_never_raise(self):
        text = decode_payload(b"ok\xff")
        assert text.startswith("ok")

    def test_unknown_encoding_falls_back_to_utf8(self):
        assert decode_payload("héllo".encode("utf-8"), encoding="no-such-codec") == "héllo"
