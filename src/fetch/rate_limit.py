"""Client-side request pacing."""
import asyncio
import time


class RateLimiter:
    """Spaces out requests to at most ``rate_per_second`` per key."""

    def __init__(self, rate_per_second: float):
        self.rate_per_second = rate_per_second
        self.min_interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._next_slot: dict[str, float] = {}
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.min_interval > 0

    async def acquire(self, key: str = "default") -> None:
        """Wait until the next slot for ``key`` is free."""
        if not self.enabled:
            return

        # Reserve the slot under the lock, sleep outside it
        async with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot.get(key, 0.0))
            self._next_slot[key] = slot + self.min_interval

        wait_time = slot - now
        if wait_time > 0:
            await asyncio.sleep(wait_time)
