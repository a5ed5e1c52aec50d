"""WebSocket feed of program log notifications via Solana logsSubscribe.

Connects to the RPC node's WS endpoint, subscribes to logs mentioning the
watched program and invokes ``on_log(signature, slot)`` for every successful
transaction. The callback is synchronous: it must only enqueue.

Delivery is best-effort: duplicates and gaps across reconnects are expected
and tolerated downstream.
"""

import asyncio
import json
from collections.abc import Callable
from enum import Enum

import websockets
from loguru import logger
from websockets.asyncio.client import ClientConnection


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ACTIVE = "active"


class LogsFeed:
    """logsSubscribe client with exponential-backoff reconnect."""

    def __init__(
        self, ws_url: str, program_id: str, *, commitment: str = "confirmed"
    ) -> None:
        self._ws_url = ws_url
        self._program_id = program_id
        self._commitment = commitment
        self._ws: ClientConnection | None = None
        self._state = ConnectionState.DISCONNECTED
        self._running = False
        self._reconnect_delay = 5.0
        self._max_reconnect_delay = 60.0
        self._message_count = 0
        self._subscription_id: int | None = None

        self.on_log: Callable[[str, int], None] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def message_count(self) -> int:
        return self._message_count

    @property
    def subscription_id(self) -> int | None:
        return self._subscription_id

    async def connect(self) -> None:
        """Connect and listen. Auto-reconnects on disconnect until stop()."""
        self._running = True
        while self._running:
            try:
                self._state = ConnectionState.CONNECTING
                async with websockets.connect(
                    self._ws_url,
                    ping_interval=30,
                    ping_timeout=10,
                    close_timeout=5,
                ) as ws:
                    self._ws = ws
                    self._state = ConnectionState.CONNECTED
                    self._reconnect_delay = 5.0
                    await self._subscribe()
                    self._state = ConnectionState.ACTIVE
                    logger.info(
                        f"[FEED] Subscribed to {self._program_id[:8]}... logs "
                        f"(subscription id={self._subscription_id})"
                    )
                    await self._listen()
            except (
                websockets.ConnectionClosed,
                ConnectionError,
                OSError,
                TimeoutError,
            ) as e:
                logger.warning(f"[FEED] WS disconnected: {e}")
            finally:
                self._state = ConnectionState.DISCONNECTED
                self._ws = None
                self._subscription_id = None

            if self._running:
                logger.info(f"[FEED] Reconnecting in {self._reconnect_delay:.0f}s...")
                await asyncio.sleep(self._reconnect_delay)
                self._reconnect_delay = min(
                    self._reconnect_delay * 2, self._max_reconnect_delay
                )

    async def _subscribe(self) -> None:
        if not self._ws:
            return
        await self._ws.send(json.dumps({
            "jsonrpc": "2.0",
            "id": 1,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self._program_id]},
                {"commitment": self._commitment},
            ],
        }))
        try:
            response = await asyncio.wait_for(self._ws.recv(), timeout=10.0)
            data = json.loads(response)
            if "result" in data:
                self._subscription_id = data["result"]
            elif "error" in data:
                logger.error(f"[FEED] logsSubscribe rejected: {data['error']}")
        except (asyncio.TimeoutError, json.JSONDecodeError) as e:
            logger.warning(f"[FEED] Subscribe confirmation failed: {e}")

    async def _listen(self) -> None:
        if not self._ws:
            return
        async for message in self._ws:
            self._message_count += 1
            self.handle_message(message)

    def handle_message(self, message: str | bytes) -> bool:
        """Dispatch one raw WS message. Returns True if on_log was invoked.

        logsNotification shape:
        {"method": "logsNotification",
         "params": {"result": {"context": {"slot": 1},
                               "value": {"signature": "...", "err": null, "logs": []}}}}
        """
        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            return False

        if not isinstance(data, dict) or data.get("method") != "logsNotification":
            return False

        result = (data.get("params") or {}).get("result") or {}
        value = result.get("value") or {}
        signature = value.get("signature")
        if not signature:
            return False
        if value.get("err"):
            return False  # failed transaction, nothing was launched

        slot = (result.get("context") or {}).get("slot", 0)

        if self.on_log is None:
            return False
        try:
            self.on_log(signature, int(slot))
        except Exception as e:
            logger.error(f"[FEED] on_log callback error: {e}")
            return False
        return True

    async def stop(self) -> None:
        self._running = False
        if self._ws:
            await self._ws.close()
            self._ws = None
        self._state = ConnectionState.DISCONNECTED
