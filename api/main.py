"""
FastAPI Application - Market Pulse Dashboard API
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from utils import logger, init_logging
from .routes import router, ws_router
from .trade_relay import TradeRelay

init_logging(app_name="api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting API server")
    if not settings.FINNHUB_API_KEY:
        logger.warning("FINNHUB_API_KEY is not set; upstream requests will be rejected")
    yield
    await app.state.trade_relay.close()
    logger.info("Shutting down API server")


app = FastAPI(
    title="Market Pulse Dashboard",
    description="Aggregated US market data and daily sentiment briefing",
    version="1.0.0",
    lifespan=lifespan
)

app.state.trade_relay = TradeRelay()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router, prefix="/api")
app.include_router(ws_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Market Pulse Dashboard",
        "version": "1.0.0",
        "status": "running"
    }


if __name__ == "__main__":
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
