"""
In-process cache for normalized places results.

Entries live for a fixed TTL from the moment they are stored. Reads never
extend an entry's life, and every read checks expiry itself, so a stale entry
is never served even if the periodic sweep has not run yet.
"""
import asyncio
import logging
import threading
import time
from typing import Callable, Optional

from app.core.logger import logs
from app.models.places_model import Place


def format_coordinate(value: float) -> str:
    """Render a coordinate the way it arrived: 2.0 -> '2', 48.8566 -> '48.8566'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def make_cache_key(lat: float, lng: float, categories: str) -> str:
    """
    Fingerprint for one places query. Coordinates are not rounded, so two
    geocodes of the same city that differ in the last decimal are two entries.
    """
    return f"places_{format_coordinate(lat)}_{format_coordinate(lng)}_{categories}"


class PlacesCache:
    def __init__(
        self,
        ttl_seconds: float = 900,
        check_period_seconds: float = 120,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.check_period_seconds = check_period_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list[Place]]] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[list[Place]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: list[Place]) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logs.log(logging.DEBUG, f"Swept {len(expired)} expired places cache entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ===== Background sweep =====

    async def _sweep_forever(self):
        while True:
            await asyncio.sleep(self.check_period_seconds)
            self.sweep()

    def start_sweeper(self) -> asyncio.Task:
        """Schedule the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())
            logs.log(logging.INFO, f"Places cache sweeper started (every {self.check_period_seconds}s)")
        return self._sweeper

    async def stop_sweeper(self):
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logs.log(logging.INFO, "Places cache sweeper stopped")
