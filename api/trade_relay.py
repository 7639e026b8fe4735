"""
Trade Relay - fans Finnhub's real-time trade stream out to browser clients

One upstream WebSocket is shared by every connected client. Clients send
`{"type": "subscribe" | "unsubscribe", "symbol": "AAPL"}`; the relay keeps
the union of requested symbols subscribed upstream and forwards every
trade message to all clients.

Lifecycle:
- first client connects -> upstream connection opens, subscriptions replayed
- upstream drops -> reconnect after WS_RECONNECT_SECONDS while clients remain
- last client leaves -> upstream closed, subscriptions cleared
"""
import asyncio
import contextlib
import json
from typing import Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake
from fastapi import WebSocket
from loguru import logger

from config import settings


class TradeRelay:
    """Shared upstream trade stream with per-process client fan-out."""

    def __init__(
        self,
        upstream_url: str = None,
        reconnect_seconds: float = None,
        connect: Callable = None,
    ):
        self.upstream_url = upstream_url or f"{settings.FINNHUB_WS_URL}?token={settings.FINNHUB_API_KEY}"
        self.reconnect_seconds = (
            reconnect_seconds if reconnect_seconds is not None else settings.WS_RECONNECT_SECONDS
        )
        self._connect = connect or websockets.connect

        self.clients: set[WebSocket] = set()
        self.subscriptions: set[str] = set()
        self._upstream = None
        self._reader_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def upstream_connected(self) -> bool:
        return self._upstream is not None

    # ============================================================
    # Client side
    # ============================================================

    async def register(self, websocket: WebSocket):
        await websocket.accept()
        self.clients.add(websocket)
        logger.info(f"[relay] Client connected (total: {len(self.clients)})")
        await self._ensure_upstream()

    async def unregister(self, websocket: WebSocket):
        self.clients.discard(websocket)
        logger.info(f"[relay] Client disconnected (total: {len(self.clients)})")
        if not self.clients:
            await self.close()

    async def handle_client_message(self, raw: str):
        """Apply a subscribe/unsubscribe request; anything else is ignored."""
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug(f"[relay] Ignoring non-JSON client message: {raw!r:.80}")
            return
        if not isinstance(message, dict):
            return

        symbol = message.get("symbol")
        if not isinstance(symbol, str) or not symbol.strip():
            return
        symbol = symbol.strip().upper()

        if message.get("type") == "subscribe":
            await self.subscribe(symbol)
        elif message.get("type") == "unsubscribe":
            await self.unsubscribe(symbol)

    async def subscribe(self, symbol: str):
        if symbol in self.subscriptions:
            return
        self.subscriptions.add(symbol)
        await self._send_upstream("subscribe", symbol)

    async def unsubscribe(self, symbol: str):
        self.subscriptions.discard(symbol)
        await self._send_upstream("unsubscribe", symbol)

    async def broadcast(self, payload: str):
        """Send to every client; clients that fail are dropped."""
        for client in list(self.clients):
            try:
                await client.send_text(payload)
            except Exception as e:
                logger.warning(f"[relay] Dropping client after send failure: {e}")
                self.clients.discard(client)

    # ============================================================
    # Upstream side
    # ============================================================

    async def _ensure_upstream(self):
        async with self._lock:
            if self._reader_task is None or self._reader_task.done():
                self._reader_task = asyncio.create_task(self._run_upstream())
                self._reader_task.add_done_callback(self._on_reader_done)

    @staticmethod
    def _on_reader_done(task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error("[relay] Upstream reader stopped")

    async def _send_upstream(self, action: str, symbol: str):
        if self._upstream is None:
            # Replayed on (re)connect
            return
        try:
            await self._upstream.send(json.dumps({"type": action, "symbol": symbol}))
        except ConnectionClosed as e:
            logger.warning(f"[relay] Could not {action} {symbol}: {e}")

    async def handle_upstream_message(self, raw):
        """Forward trade messages; pings and everything else are dropped."""
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("[relay] Ignoring non-JSON upstream message")
            return
        if isinstance(message, dict) and message.get("type") == "trade" and message.get("data"):
            await self.broadcast(json.dumps(message))

    async def _run_upstream(self):
        while self.clients:
            try:
                async with self._connect(self.upstream_url) as upstream:
                    self._upstream = upstream
                    logger.info("[relay] Upstream connected")
                    for symbol in sorted(self.subscriptions):
                        await self._send_upstream("subscribe", symbol)
                    async for raw in upstream:
                        await self.handle_upstream_message(raw)
                logger.info("[relay] Upstream disconnected")
            except (ConnectionClosed, InvalidHandshake, OSError) as e:
                logger.error(f"[relay] Upstream error: {e}")
            except Exception:
                logger.exception("[relay] Unexpected upstream failure")
            finally:
                self._upstream = None

            if self.clients:
                logger.info(f"[relay] Reconnecting in {self.reconnect_seconds}s")
                await asyncio.sleep(self.reconnect_seconds)

    async def close(self):
        """Close the upstream connection and forget all subscriptions."""
        task, self._reader_task = self._reader_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._upstream = None
        self.subscriptions.clear()
