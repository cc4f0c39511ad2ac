"""
FastAPI Application - CoinPeek Price & Fee API

Serves the aggregated Bitcoin / Ethereum snapshot to display clients.

Features:
    - Message channel: POST /message with {"type": "FETCH_CRYPTO_DATA", "forceRefresh": bool}
    - Fresh-or-refresh snapshot, display-ready summary, currency conversion
    - Live updates (snapshots + badge) over WebSocket

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings, validate_configuration
from core.exceptions import CoinPeekError
from core.logging import logger, log_websocket_event
from core.schemas import BadgeUpdate, ConversionResult, MessageResponse, SnapshotSummary, USD
from core.utils.conversion import convert_currency, round_for_currency
from services.event_bus import TOPIC_BADGE, TOPIC_DATA_UPDATE
from services.summary import summarize_snapshot
from services.update_orchestrator import UpdateOrchestrator, build_orchestrator


router = APIRouter()


def _orchestrator(request: Request) -> UpdateOrchestrator:
    return request.app.state.orchestrator


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await app.state.orchestrator.start()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await app.state.orchestrator.stop()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# System Endpoints
# ============================================

@router.get("/", tags=["System"])
async def root():
    """API information."""
    return {
        "name": "CoinPeek Price & Fee API",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment,
        "docs": "/docs",
        "assets": ["bitcoin", "ethereum"]
    }


@router.get("/health", tags=["System"])
async def health_check(request: Request):
    """Health check - reports cache freshness and orchestrator state."""
    orchestrator = _orchestrator(request)
    snapshot = await orchestrator.cache.read()
    stale = orchestrator.cache.is_stale(snapshot)
    return {
        "status": "healthy" if not stale else "degraded",
        "state": orchestrator.state.value,
        "last_update": snapshot.timestamp if snapshot else None,
        "stale": stale
    }


# ============================================
# Message Channel
# ============================================

@router.post("/message", response_model=MessageResponse, tags=["Prices"])
async def post_message(request: Request, message: Dict[str, Any] = Body(...)):
    """
    Request/response channel for display clients.

    Example:
        POST /message  {"type": "FETCH_CRYPTO_DATA", "forceRefresh": true}
    """
    return await _orchestrator(request).handle_message(message)


@router.get("/prices", response_model=MessageResponse, tags=["Prices"])
async def get_prices(
    request: Request,
    force_refresh: bool = Query(default=False, description="Bypass cache freshness and the rate gate")
):
    """
    Current snapshot: the cached one while fresh, otherwise a refreshed one.

    Example:
        GET /prices?force_refresh=true
    """
    try:
        snapshot = await _orchestrator(request).get_current(force_refresh)
    except CoinPeekError as e:
        logger.error(f"Prices request failed: {e}")
        return {"success": False, "error": str(e)}
    return {"success": True, "data": snapshot.to_storage()}


@router.get("/summary", response_model=SnapshotSummary, tags=["Prices"])
async def get_summary(request: Request):
    """Display-ready strings for the cached snapshot."""
    orchestrator = _orchestrator(request)
    snapshot = await orchestrator.cache.read()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No price data available yet")
    return summarize_snapshot(snapshot, orchestrator.cache.now(), orchestrator.cache.is_stale(snapshot))


@router.get("/convert", response_model=ConversionResult, tags=["Prices"])
async def convert(
    request: Request,
    amount: float = Query(..., description="Amount to convert"),
    from_currency: str = Query(default="bitcoin", description="bitcoin, ethereum or usd"),
    to_currency: str = Query(default=USD, description="bitcoin, ethereum or usd")
):
    """
    Convert between bitcoin, ethereum and usd at cached prices.

    Example:
        GET /convert?amount=0.5&from_currency=bitcoin&to_currency=usd
    """
    snapshot = await _orchestrator(request).cache.read()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No price data available yet")

    from_currency = from_currency.lower()
    to_currency = to_currency.lower()
    try:
        result = convert_currency(amount, from_currency, to_currency, snapshot.prices)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ConversionResult(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        result=round_for_currency(result, to_currency)
    )


@router.get("/badge", response_model=BadgeUpdate, tags=["Prices"])
async def get_badge(request: Request):
    """The badge currently shown on the display surface."""
    badge: Optional[BadgeUpdate] = getattr(_orchestrator(request).display, "current", None)
    if badge is None:
        raise HTTPException(status_code=404, detail="No badge yet")
    return badge


# ============================================
# WebSocket Stream
# ============================================

@router.websocket("/ws/updates")
async def websocket_updates(websocket: WebSocket):
    """
    Pushes CRYPTO_DATA_UPDATE and UPDATE_BADGE events as they happen.

    Example:
        ws://localhost:8000/ws/updates
    """
    await websocket.accept()
    log_websocket_event("updates", "connected")
    event_bus = websocket.app.state.orchestrator.bus
    queue: asyncio.Queue = event_bus.subscribe(TOPIC_DATA_UPDATE)
    event_bus.subscribe(TOPIC_BADGE, queue)
    try:
        while True:
            event = await queue.get()
            await websocket.send_json(event)
    except WebSocketDisconnect:
        log_websocket_event("updates", "disconnected")
    except Exception as e:
        log_websocket_event("updates", "error", str(e))
        with contextlib.suppress(RuntimeError):
            await websocket.close(code=1011, reason="Internal error")
    finally:
        event_bus.unsubscribe(TOPIC_DATA_UPDATE, queue)
        event_bus.unsubscribe(TOPIC_BADGE, queue)


# ============================================
# FastAPI Application
# ============================================

def create_app(orchestrator: Optional[UpdateOrchestrator] = None) -> FastAPI:
    """
    Build the FastAPI app around an orchestrator (a production one from
    settings if none is given).
    """
    app = FastAPI(
        title="CoinPeek Price & Fee API",
        description=(
            "Bitcoin and Ethereum spot prices with network fee estimates, "
            "aggregated from several providers with fallback and caching.\n\n"
            "## REST Endpoints\n"
            "- `POST /message` - Message channel (`FETCH_CRYPTO_DATA`)\n"
            "- `GET /prices` - Current snapshot (fresh or refreshed)\n"
            "- `GET /summary` - Display-ready snapshot\n"
            "- `GET /convert` - Currency conversion at cached prices\n"
            "- `GET /badge` - Current badge\n"
            "- `GET /health` - Health check\n\n"
            "## WebSocket Streams\n"
            "- `ws://{host}/ws/updates` - snapshot and badge updates\n"
        ),
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.orchestrator = orchestrator or build_orchestrator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.include_router(router)
    return app


app = create_app()
