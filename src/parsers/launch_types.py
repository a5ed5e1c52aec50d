"""Types shared by the launch ingest pipeline.

PendingEvent is what the feed produces, ResolvedLaunch is what the worker
hands to the launch log. PipelineConfig carries every tunable of the
pipeline explicitly so the controller never reads process-wide settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings import Settings

SOLSCAN_TX_URL = "https://solscan.io/tx/{signature}"

DEFAULT_QUEUE_MAX = 2000
DEFAULT_FETCH_RPS = 3.0
MIN_TICK_INTERVAL_SEC = 0.2  # hard ceiling of 5 lookups/s


class PipelineConfigError(ValueError):
    """Invalid pipeline configuration, raised before any event is processed."""


def solscan_url(signature: str) -> str:
    return SOLSCAN_TX_URL.format(signature=signature)


@dataclass(frozen=True)
class PendingEvent:
    """A launch transaction observed by the feed, waiting for mint lookup."""

    timestamp: datetime
    slot: int
    signature: str


@dataclass(frozen=True)
class ResolvedLaunch:
    """A launch after mint resolution. mint is None when lookup yielded nothing."""

    timestamp: datetime
    slot: int
    signature: str
    mint: str | None
    url: str

    @classmethod
    def from_event(cls, event: PendingEvent, mint: str | None) -> ResolvedLaunch:
        return cls(
            timestamp=event.timestamp,
            slot=event.slot,
            signature=event.signature,
            mint=mint,
            url=solscan_url(event.signature),
        )


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit configuration for LaunchPipeline."""

    rpc_endpoint: str
    ws_endpoint: str
    program_id: str
    mint_fetch_rps: float = DEFAULT_FETCH_RPS
    queue_max: int = DEFAULT_QUEUE_MAX
    min_tick_interval_sec: float = MIN_TICK_INTERVAL_SEC
    overflow_report_every: int = 50
    stats_interval_sec: int = 60

    def __post_init__(self) -> None:
        if not self.rpc_endpoint:
            raise PipelineConfigError("rpc_endpoint must be set")
        if self.queue_max < 1:
            raise PipelineConfigError(
                f"queue_max must be >= 1, got {self.queue_max}"
            )
        if not self.mint_fetch_rps > 0:
            raise PipelineConfigError(
                f"mint_fetch_rps must be > 0, got {self.mint_fetch_rps}"
            )
        if self.min_tick_interval_sec < MIN_TICK_INTERVAL_SEC:
            raise PipelineConfigError(
                f"min_tick_interval_sec must be >= {MIN_TICK_INTERVAL_SEC}, "
                f"got {self.min_tick_interval_sec}"
            )
        if self.overflow_report_every < 1:
            raise PipelineConfigError(
                f"overflow_report_every must be >= 1, got {self.overflow_report_every}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            rpc_endpoint=settings.rpc_endpoint,
            ws_endpoint=settings.resolved_ws_endpoint,
            program_id=settings.pumpfun_program_id,
            mint_fetch_rps=settings.mint_fetch_rps,
            queue_max=settings.mint_queue_max,
            min_tick_interval_sec=settings.min_tick_interval_sec,
            overflow_report_every=settings.overflow_report_every,
            stats_interval_sec=settings.stats_interval_sec,
        )
