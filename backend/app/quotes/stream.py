"""HTTP and SSE endpoints over a QuoteService."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.responses import StreamingResponse

from .service import QuoteService

logger = logging.getLogger(__name__)


def snapshot_payload(service: QuoteService) -> dict:
    """Snapshot plus status fields, as served to consumers."""
    last_update = service.last_update
    return {
        "quotes": [quote.to_dict() for quote in service.get_snapshot()],
        "last_update": last_update.isoformat() if last_update else None,
        "last_error": service.last_error,
        "state": service.state.value,
        "status": service.status_text(),
    }


def create_quotes_router(service: QuoteService) -> APIRouter:
    """Create the quotes/watch-list router bound to a service instance.

    This factory pattern lets us inject the QuoteService without globals.
    """
    router = APIRouter(prefix="/api", tags=["quotes"])

    @router.get("/quotes")
    async def get_quotes() -> dict:
        return snapshot_payload(service)

    @router.post("/quotes/refresh")
    async def refresh_quotes() -> dict:
        """Out-of-band refresh. ``refreshed`` is False if one was already in flight."""
        refreshed = await service.force_refresh()
        return {"refreshed": refreshed, "status": service.status_text()}

    @router.get("/quotes/{symbol}")
    async def get_quote(symbol: str) -> dict:
        quote = service.get_quote(symbol)
        if quote is None:
            raise HTTPException(status_code=404, detail=f"No quote for {symbol!r}")
        return quote.to_dict()

    @router.get("/watchlist")
    async def get_watchlist() -> dict:
        return {"symbols": service.get_symbols()}

    @router.put("/watchlist")
    async def put_watchlist(symbols: list[str] = Body(..., embed=True)) -> dict:
        return {"symbols": service.set_symbols(symbols)}

    @router.get("/stream/quotes")
    async def stream_quotes(request: Request) -> StreamingResponse:
        """SSE endpoint for live quote updates.

        Pushes the full snapshot whenever the service publishes a change
        (refresh cycle or watch-list edit):

            data: {"quotes": [{"symbol": "sh600519", ...}], "last_update": ...}
        """
        return StreamingResponse(
            _generate_events(service, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    service: QuoteService,
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted snapshot events.

    Polls the service version every `interval` seconds and emits only on
    change. Stops when the client disconnects.
    """
    # Tell the client to retry after 1 second if the connection drops
    yield "retry: 1000\n\n"

    last_version = -1
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            current_version = service.version
            if current_version != last_version:
                last_version = current_version
                payload = json.dumps(snapshot_payload(service), ensure_ascii=False)
                yield f"data: {payload}\n\n"

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
