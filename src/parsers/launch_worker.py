"""Rate-limited mint lookup worker.

A timer fires tick() every ``interval`` seconds as a background task. Each
tick pops at most one launch, resolves its mint and appends the record to
the launch log. Single-flight: a tick that finds the previous one still
BUSY is dropped, not queued, so a slow RPC node lowers throughput instead
of piling up concurrent lookups.
"""

import asyncio
import time
from enum import Enum
from typing import Protocol

from loguru import logger

from src.parsers.launch_queue import LaunchQueue
from src.parsers.launch_types import ResolvedLaunch
from src.parsers.metrics import PipelineMetrics
from src.parsers.mint_resolver import MintResolver


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"


class LaunchSink(Protocol):
    async def append(self, launch: ResolvedLaunch) -> None: ...


class MintWorker:
    """Drains LaunchQueue one event per tick, never two lookups at once."""

    def __init__(
        self,
        queue: LaunchQueue,
        resolver: MintResolver,
        sink: LaunchSink,
        *,
        interval: float,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self._queue = queue
        self._resolver = resolver
        self._sink = sink
        self._interval = interval
        self._metrics = metrics or PipelineMetrics()
        self._state = WorkerState.IDLE
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._stopping = False

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def tick(self) -> ResolvedLaunch | None:
        """Process at most one queued launch. Returns the record sent to the sink."""
        if self._stopping:
            return None
        if self._state is WorkerState.BUSY:
            self._metrics.record_skipped_tick()
            return None

        event = self._queue.pop()
        if event is None:
            return None

        # No await between the BUSY check and here, so ticks cannot interleave.
        self._state = WorkerState.BUSY
        try:
            t_start = time.monotonic()
            mint = await self._resolver.resolve(event.signature)
            latency_ms = (time.monotonic() - t_start) * 1000
            self._metrics.record_processed(latency_ms, resolved=mint is not None)

            launch = ResolvedLaunch.from_event(event, mint)
            try:
                await self._sink.append(launch)
            except Exception as e:
                self._metrics.record_sink_error()
                logger.opt(exception=True).error(
                    f"[WORKER] Failed to persist {event.signature[:12]}: "
                    f"{type(e).__name__}: {e}"
                )

            logger.info(
                f"[WORKER] slot={launch.slot} sig={launch.signature[:12]}... "
                f"mint={launch.mint or '(unknown)'} "
                f"queue={len(self._queue)}"
            )
            return launch
        finally:
            self._state = WorkerState.IDLE

    def start(self) -> None:
        if self.running:
            return
        self._stopping = False
        self._timer = asyncio.create_task(self._schedule())
        logger.info(
            f"[WORKER] Started: one lookup every {self._interval * 1000:.0f} ms, "
            f"queue max {self._queue.capacity} (oldest dropped on overflow)"
        )

    async def _schedule(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            task = asyncio.create_task(self._safe_tick())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    async def _safe_tick(self) -> None:
        try:
            await self.tick()
        except Exception as e:
            logger.opt(exception=True).error(f"[WORKER] Tick error (recovering): {e}")

    async def stop(self) -> None:
        """Stop scheduling; let any in-flight lookup finish."""
        # Ticks already scheduled but not yet started must not pop anything.
        self._stopping = True
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info(f"[WORKER] Stopped ({len(self._queue)} launches left in queue)")
