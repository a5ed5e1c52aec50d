"""Shared test fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from src.parsers.launch_types import PendingEvent, ResolvedLaunch, solscan_url
from src.parsers.persistence import LaunchLog
from src.parsers.solana_rpc.client import SolanaRpcClient

BASE_TIME = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_event() -> Callable[..., PendingEvent]:
    """Factory for PendingEvent with sequential defaults."""

    def _make(i: int = 0, *, signature: str | None = None) -> PendingEvent:
        return PendingEvent(
            timestamp=BASE_TIME + timedelta(seconds=i),
            slot=300_000_000 + i,
            signature=signature or f"sig{i:04d}",
        )

    return _make


@pytest.fixture
def make_launch() -> Callable[..., ResolvedLaunch]:
    def _make(i: int = 0, *, mint: str | None = "MintAddr111pump") -> ResolvedLaunch:
        signature = f"sig{i:04d}"
        return ResolvedLaunch(
            timestamp=BASE_TIME + timedelta(seconds=i),
            slot=300_000_000 + i,
            signature=signature,
            mint=mint,
            url=solscan_url(signature),
        )

    return _make


@pytest.fixture
def launch_log(tmp_path) -> LaunchLog:
    return LaunchLog(tmp_path / "launches.log")


@pytest_asyncio.fixture(scope="function")
async def rpc_client() -> AsyncGenerator[SolanaRpcClient, None]:
    """RPC client with a high rate limit; tests replace its httpx client."""
    client = SolanaRpcClient("https://rpc.test", max_rps=1000.0)
    yield client
    await client.close()
