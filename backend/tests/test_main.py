"""Tests for the FastAPI application lifespan."""

from fastapi.testclient import TestClient

from app.main import create_app
from app.quotes.service import QuoteService, ServiceState


class TestCreateApp:
    def test_lifespan_starts_and_stops_service(self, store, fetcher):
        store.set_symbols(["sh600519"])
        service = QuoteService(store=store, fetcher_factory=lambda: fetcher, refresh_interval=60.0)
        app = create_app(service)

        with TestClient(app) as client:
            assert service.state is ServiceState.IDLE
            body = client.get("/api/quotes").json()
            assert [q["symbol"] for q in body["quotes"]] == ["sh600519"]
            assert body["last_error"] is None
            assert body["status"].startswith("updated ")

        assert service.state is ServiceState.STOPPED
        assert fetcher.closed
        assert fetcher.calls[0] == ["sh600519"]

    def test_app_exposes_service(self, store, fetcher):
        service = QuoteService(store=store, fetcher_factory=lambda: fetcher)
        app = create_app(service)
        assert app.state.quote_service is service
