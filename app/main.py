"""
FastAPI Application - DeBoard Price Relay

Keeps one upstream connection to Binance and serves the resulting price
table to any number of dashboard clients.

Features:
    - Poll: full price table as JSON
    - Stream: Server-Sent Events push of the full table on every change,
      with a keep-alive comment every 30 seconds
    - Token catalogue ordered by market cap, joined with live prices

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional

from app.streaming import SSE_HEADERS, stream_prices
from core.config import Settings, settings, validate_configuration
from core.logging import logger, set_log_level
from core.schemas import PriceSnapshot
from core.tokens import TOKENS_BY_MARKET_CAP
from core.utils.time import to_utc_datetime
from exchanges.binance.ws_client import BinanceTickerStream
from services.relay import PriceRelay


router = APIRouter()


def get_relay(request: Request) -> PriceRelay:
    """Dependency: the relay built by the application lifespan."""
    return request.app.state.relay


# ============================================
# System Endpoints
# ============================================

@router.get("/", tags=["System"])
async def root(relay: PriceRelay = Depends(get_relay)):
    """Service information."""
    return {
        "name": "DeBoard Price Relay",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "upstream": relay.config.binance_ws_url,
        "tokens": relay.config.tracked_tokens_list,
    }


@router.get("/health", tags=["System"])
async def health_check(relay: PriceRelay = Depends(get_relay)):
    """Health check - upstream connection state and subscriber count."""
    status = relay.status()
    status["last_update_iso"] = to_utc_datetime(status["last_update"]).isoformat()
    status["status"] = "healthy" if status["upstream"] == "connected" else "degraded"
    return status


# ============================================
# Price Endpoints
# ============================================

@router.get("/api/prices", tags=["Prices"])
async def get_prices(request: Request, relay: PriceRelay = Depends(get_relay)):
    """
    Current price table, polled or streamed.

    - Default: JSON `{"prices": {...}, "timestamp": <epoch ms>}`
    - `Accept: text/event-stream`: SSE stream that sends the full table
      immediately, again on every upstream change, and `:heartbeat`
      every 30 seconds until the client disconnects.
    """
    accept = request.headers.get("accept", "")
    if "text/event-stream" not in accept:
        return relay.broadcaster.build_poll().model_dump(by_alias=True)

    client = f"{request.client.host}:{request.client.port}" if request.client else "unknown"
    logger.info(f"SSE client connected: {client}")

    return StreamingResponse(
        stream_prices(relay.broadcaster, client, relay.config.sse_keepalive_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/api/prices/{token_id}", response_model=PriceSnapshot, tags=["Prices"])
async def get_token_price(token_id: str, relay: PriceRelay = Depends(get_relay)):
    """
    Latest snapshot for one token.

    Example:
        GET /api/prices/eth
    """
    snapshot = relay.price_table.get(token_id.lower())
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Token '{token_id}' is not tracked")
    return snapshot


@router.get("/api/tokens", tags=["Prices"])
async def list_tokens(relay: PriceRelay = Depends(get_relay)):
    """Tracked tokens ordered by market cap rank, each with its latest price."""
    prices = relay.price_table.snapshot_all()
    return [
        {**token.model_dump(), "price": prices[token.id].model_dump(by_alias=True)}
        for token in TOKENS_BY_MARKET_CAP
        if token.id in prices
    ]


# ============================================
# Application Factory
# ============================================

def create_app(config: Optional[Settings] = None, stream: Optional[BinanceTickerStream] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Settings (defaults to the global settings)
        stream: Upstream transport override, used by tests

    Returns:
        FastAPI app whose lifespan owns one PriceRelay
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle application startup and shutdown."""
        logger.info("=== Application Starting ===")
        try:
            validate_configuration(config)
            set_log_level(config.log_level)
            relay = PriceRelay(config, stream=stream)
            await relay.start()
            app.state.relay = relay
            logger.info("=== Started Successfully ===")
        except Exception as e:
            logger.error(f"Startup failed: {e}")
            raise

        yield

        logger.info("=== Shutting Down ===")
        try:
            await relay.stop()
            logger.info("=== Shutdown Complete ===")
        except Exception as e:
            logger.error(f"Shutdown error: {e}")

    app = FastAPI(
        title="DeBoard Price Relay",
        description=(
            "Single-upstream, many-subscriber token price relay.\n\n"
            "- `GET /api/prices` - Full price table (send `Accept: text/event-stream` to stream)\n"
            "- `GET /api/prices/{token_id}` - One token's latest price\n"
            "- `GET /api/tokens` - Token catalogue by market cap with prices\n"
            "- `GET /health` - Upstream and subscriber status"
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.include_router(router)

    @app.exception_handler(500)
    async def internal_error_handler(request, exc):
        """Handle 500 errors."""
        logger.error(f"Internal error: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


app = create_app()
