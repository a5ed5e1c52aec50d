"""Launch pipeline metrics: throughput, resolution coverage, loss.

Counters accumulate during runtime and are read by the stats reporter.
Guarded by a lock because the reporter may read from another thread.
"""

import time
from threading import Lock


class PipelineMetrics:
    """Metrics accumulator for the launch pipeline."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._start_time: float = time.monotonic()
        self.queued: int = 0
        self.dropped: int = 0
        self.processed: int = 0
        self.resolved: int = 0
        self.unresolved: int = 0
        self.sink_errors: int = 0
        self.skipped_ticks: int = 0
        self._total_latency_ms: float = 0.0
        self._max_latency_ms: float = 0.0

    def record_queued(self, *, dropped: bool = False) -> None:
        with self._lock:
            self.queued += 1
            if dropped:
                self.dropped += 1

    def record_processed(self, latency_ms: float, *, resolved: bool) -> None:
        """Record a launch that went through resolution."""
        with self._lock:
            self.processed += 1
            if resolved:
                self.resolved += 1
            else:
                self.unresolved += 1
            self._total_latency_ms += latency_ms
            if latency_ms > self._max_latency_ms:
                self._max_latency_ms = latency_ms

    def record_sink_error(self) -> None:
        with self._lock:
            self.sink_errors += 1

    def record_skipped_tick(self) -> None:
        with self._lock:
            self.skipped_ticks += 1

    @property
    def avg_latency_ms(self) -> float:
        if self.processed == 0:
            return 0.0
        return self._total_latency_ms / self.processed

    @property
    def resolve_rate_pct(self) -> float:
        if self.processed == 0:
            return 0.0
        return self.resolved / self.processed * 100

    def get_summary(self) -> dict:
        """Return a snapshot of all metrics."""
        with self._lock:
            uptime = time.monotonic() - self._start_time
            return {
                "uptime_sec": round(uptime),
                "queued": self.queued,
                "dropped": self.dropped,
                "processed": self.processed,
                "resolved": self.resolved,
                "unresolved": self.unresolved,
                "sink_errors": self.sink_errors,
                "skipped_ticks": self.skipped_ticks,
                "processed_per_min": round(self.processed / max(uptime / 60, 1), 1),
                "avg_latency_ms": round(self.avg_latency_ms),
                "max_latency_ms": round(self._max_latency_ms),
                "resolve_rate_pct": round(self.resolve_rate_pct, 1),
            }

    def format_stats_line(self) -> str:
        """One-line summary for the stats reporter."""
        with self._lock:
            uptime = time.monotonic() - self._start_time
            rate = self.processed / max(uptime / 60, 1)
            return (
                f"queued={self.queued} dropped={self.dropped} "
                f"processed={self.processed} resolved={self.resolved} "
                f"rate={rate:.1f}/min "
                f"avg_lat={self.avg_latency_ms:.0f}ms "
                f"sink_errors={self.sink_errors} skipped_ticks={self.skipped_ticks}"
            )
