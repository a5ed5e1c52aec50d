"""Tests for LaunchPipeline wiring: feed callback, overflow and shutdown."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from loguru import logger

from src.parsers.launch_types import PipelineConfig, PipelineConfigError
from src.parsers.pipeline import LaunchPipeline
from src.parsers.solana_rpc.models import EpochInfo
from src.parsers.solana_rpc.ws_client import LogsFeed

PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"


class ListSink:
    def __init__(self) -> None:
        self.launches = []

    async def append(self, launch) -> None:
        self.launches.append(launch)


def _config(**overrides) -> PipelineConfig:
    base = dict(
        rpc_endpoint="https://rpc.test",
        ws_endpoint="wss://rpc.test",
        program_id=PROGRAM_ID,
        queue_max=3,
        overflow_report_every=2,
    )
    base.update(overrides)
    return PipelineConfig(**base)


def _pipeline(config: PipelineConfig | None = None) -> tuple[LaunchPipeline, MagicMock, LogsFeed]:
    rpc = MagicMock()
    rpc.get_transaction_meta = AsyncMock(return_value=None)
    rpc.get_epoch_info = AsyncMock(
        return_value=EpochInfo(absolute_slot=1, epoch=1, slot_index=1)
    )
    rpc.close = AsyncMock()
    feed = LogsFeed("wss://rpc.test", PROGRAM_ID)
    pipeline = LaunchPipeline(config or _config(), rpc, feed, ListSink())
    return pipeline, rpc, feed


@pytest.fixture
def warnings():
    records: list[str] = []
    handler_id = logger.add(lambda msg: records.append(msg), level="WARNING", format="{message}")
    yield records
    logger.remove(handler_id)


class TestConfig:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"queue_max": 0},
            {"mint_fetch_rps": 0},
            {"mint_fetch_rps": -1.0},
            {"mint_fetch_rps": float("nan")},
            {"min_tick_interval_sec": 0.1},
            {"overflow_report_every": 0},
            {"rpc_endpoint": ""},
        ],
    )
    def test_invalid_config_rejected(self, overrides) -> None:
        with pytest.raises(PipelineConfigError):
            _config(**overrides)

    def test_tick_interval_from_rate(self) -> None:
        pipeline, _, _ = _pipeline(_config(mint_fetch_rps=3.0))
        assert pipeline.worker.interval == pytest.approx(1 / 3)

    def test_tick_interval_floor(self) -> None:
        pipeline, _, _ = _pipeline(_config(mint_fetch_rps=50.0))
        assert pipeline.worker.interval == pytest.approx(0.2)


class TestOnLog:
    def test_feed_wired_to_queue(self) -> None:
        pipeline, _, feed = _pipeline()
        feed.on_log("sigA", 42)

        [event] = pipeline.queue.snapshot()
        assert event.signature == "sigA"
        assert event.slot == 42
        assert event.timestamp.tzinfo is not None

    def test_overflow_drops_oldest_and_warns_periodically(self, warnings) -> None:
        pipeline, _, _ = _pipeline()
        for i in range(8):
            pipeline.on_log(f"sig{i}", i)

        assert [e.signature for e in pipeline.queue.snapshot()] == ["sig5", "sig6", "sig7"]
        assert pipeline.dropped == 5
        assert pipeline.metrics.queued == 8
        assert pipeline.metrics.dropped == 5
        # reported at 2 and 4 dropped
        overflow = [w for w in warnings if "[QUEUE] Overflow" in w]
        assert len(overflow) == 2


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_check_connection(self) -> None:
        pipeline, rpc, _ = _pipeline()
        assert await pipeline.check_connection() == 1
        rpc.get_epoch_info.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_idempotent_and_ignores_late_events(self) -> None:
        pipeline, rpc, _ = _pipeline()
        pipeline.worker.start()

        await pipeline.shutdown()
        await pipeline.shutdown()

        rpc.close.assert_awaited_once()
        assert pipeline.worker.running is False
        pipeline.on_log("late", 1)
        assert len(pipeline.queue) == 0
