import asyncio

from src.parsers.launch_types import MIN_TICK_INTERVAL_SEC, PipelineConfigError


def tick_interval(max_rps: float, floor: float = MIN_TICK_INTERVAL_SEC) -> float:
    """Seconds between operations for max_rps, never below floor.

    The floor is an RPC politeness ceiling: a caller asking for 10/s still
    gets at most 1/floor operations per second.
    """
    if not max_rps > 0:
        raise PipelineConfigError(f"Rate must be > 0, got {max_rps}")
    return max(1.0 / max_rps, floor)


class RateLimiter:
    """Min-interval rate limiter for async HTTP clients."""

    def __init__(self, max_rps: float, floor: float = 0.0) -> None:
        self._min_interval = tick_interval(max_rps, floor)
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def acquire(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            wait = self._min_interval - (now - self._last_request)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = loop.time()
