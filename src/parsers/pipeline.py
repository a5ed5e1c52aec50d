"""Launch pipeline: wires the logs feed, queue, mint worker and launch log.

Runs on one event loop:
1. LogsFeed: websocket logsSubscribe, pushes each launch tx into the queue
2. MintWorker: timer-driven, resolves one queued tx per tick
3. Stats reporter: periodic logging of pipeline health

The feed callback never awaits; the worker never blocks the feed beyond the
O(1) queue mutation.
"""

import asyncio
from datetime import datetime, timezone

from loguru import logger

from src.parsers.launch_queue import LaunchQueue
from src.parsers.launch_types import PendingEvent, PipelineConfig
from src.parsers.launch_worker import LaunchSink, MintWorker
from src.parsers.metrics import PipelineMetrics
from src.parsers.mint_resolver import MintResolver
from src.parsers.rate_limiter import tick_interval
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.solana_rpc.ws_client import LogsFeed


class LaunchPipeline:
    """Owns the queue and the shared lifecycle of feed, worker and RPC client."""

    def __init__(
        self,
        config: PipelineConfig,
        rpc: SolanaRpcClient,
        feed: LogsFeed,
        sink: LaunchSink,
    ) -> None:
        self._config = config
        self._rpc = rpc
        self._feed = feed
        self._sink = sink
        self._metrics = PipelineMetrics()
        self._queue = LaunchQueue(config.queue_max)
        self._resolver = MintResolver(rpc.get_transaction_meta)
        self._worker = MintWorker(
            self._queue,
            self._resolver,
            sink,
            interval=tick_interval(config.mint_fetch_rps, config.min_tick_interval_sec),
            metrics=self._metrics,
        )
        self._feed.on_log = self.on_log
        self._tasks: list[asyncio.Task] = []
        self._stopped = asyncio.Event()
        self._shutting_down = False

    @property
    def queue(self) -> LaunchQueue:
        return self._queue

    @property
    def worker(self) -> MintWorker:
        return self._worker

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics

    @property
    def dropped(self) -> int:
        """Launches evicted from the queue due to overflow."""
        return self._queue.dropped

    def on_log(self, signature: str, slot: int) -> None:
        """Feed callback: O(1) enqueue, never awaits."""
        if self._shutting_down:
            return
        event = PendingEvent(
            timestamp=datetime.now(timezone.utc), slot=slot, signature=signature
        )
        evicted = self._queue.push(event)
        self._metrics.record_queued(dropped=evicted is not None)

        if evicted is not None and self._queue.dropped % self._config.overflow_report_every == 0:
            logger.warning(
                f"[QUEUE] Overflow: dropped {self._queue.dropped} old pending tx so far "
                f"to keep queue <= {self._queue.capacity}"
            )
        logger.debug(
            f"[FEED] Launch tx queued: slot={slot} sig={signature[:12]}... "
            f"queue={len(self._queue)}/{self._queue.capacity}"
        )

    async def check_connection(self) -> int:
        """Verify the RPC endpoint answers. Returns the current absolute slot."""
        epoch = await self._rpc.get_epoch_info()
        logger.info(
            f"Connected to {self._config.rpc_endpoint} "
            f"(absolute slot {epoch.absolute_slot})"
        )
        return epoch.absolute_slot

    async def run(self) -> None:
        """Start everything and block until shutdown() completes."""
        await self.check_connection()

        self._worker.start()
        self._tasks = [
            asyncio.create_task(self._feed.connect()),
            asyncio.create_task(self._stats_reporter()),
        ]
        logger.info(
            f"Watching {self._config.program_id}, lookups every "
            f"{self._worker.interval * 1000:.0f} ms, queue max {self._queue.capacity}"
        )
        await self._stopped.wait()

    async def _stats_reporter(self) -> None:
        """Log pipeline stats every stats_interval_sec."""
        while True:
            await asyncio.sleep(self._config.stats_interval_sec)
            logger.info(
                f"[STATS] WS messages: {self._feed.message_count} | "
                f"WS state: {self._feed.state.value} | "
                f"Queue: {len(self._queue)}/{self._queue.capacity} | "
                f"Worker: {self._worker.state.value} | "
                f"resolve errors={self._resolver.errors} | "
                f"{self._metrics.format_stats_line()}"
            )

    async def shutdown(self) -> None:
        """Stop scheduling, finish the in-flight lookup, release connections."""
        if self._shutting_down:
            return
        self._shutting_down = True

        await self._worker.stop()
        await self._feed.stop()

        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Background task ended with error: {e}")
        self._tasks = []

        await self._rpc.close()
        logger.info(
            f"Pipeline stopped: {len(self._queue)} launches left unprocessed, "
            f"{self._queue.dropped} dropped on overflow"
        )
        self._stopped.set()
