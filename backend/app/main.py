"""FastAPI application wiring the quote service to its HTTP surface."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.quotes import QuoteService, create_quote_service, create_quotes_router

logger = logging.getLogger(__name__)


def create_app(service: QuoteService | None = None) -> FastAPI:
    """Build the app. The service is started and stopped with the app lifespan."""
    service = service or create_quote_service()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    app = FastAPI(title="quotewatch", lifespan=lifespan)
    app.state.quote_service = service
    app.include_router(create_quotes_router(service))
    return app
