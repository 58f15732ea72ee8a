import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Set, TypeVar

from loguru import logger

from ..datasources.base import DataSource
from ..errors import AppError
from ..services.cache import CacheStore

T = TypeVar("T")


class CachedRepository:
    """Stale-while-revalidate reads over a data source.

    A cache hit is returned at once and a background task refetches the same
    query to overwrite the entry. A miss is fetched live and written through.
    Reads with no cache key (pages past the first) always go to the network.
    """

    def __init__(self, source: DataSource, cache: CacheStore, revalidate_min_interval: float = 0):
        self.source = source
        self.cache = cache
        self.revalidate_min_interval = revalidate_min_interval
        self._background: Set[asyncio.Task] = set()
        self._last_refresh: Dict[str, float] = {}

    async def _read_through(
        self,
        key: Optional[str],
        kind: Any,
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        if key is not None:
            cached = await self.cache.get(key, kind)
            if cached is not None:
                logger.debug(f"Cache hit for {key}")
                self._schedule_revalidation(key, kind, fetch)
                return cached

        value = await fetch()
        if key is not None:
            await self.cache.put(key, value, kind)
            self._mark_refreshed(key, time.monotonic())
        return value

    def _mark_refreshed(self, key: str, now: float) -> None:
        # timestamps only matter when refreshes are throttled
        if self.revalidate_min_interval > 0:
            self._last_refresh[key] = now

    def _schedule_revalidation(self, key: str, kind: Any, fetch: Callable[[], Awaitable[Any]]) -> None:
        now = time.monotonic()
        last = self._last_refresh.get(key)
        if last is not None and now - last < self.revalidate_min_interval:
            return
        self._mark_refreshed(key, now)
        task = asyncio.create_task(self._revalidate(key, kind, fetch))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _revalidate(self, key: str, kind: Any, fetch: Callable[[], Awaitable[Any]]) -> None:
        try:
            value = await fetch()
            await self.cache.put(key, value, kind)
            logger.debug(f"Revalidated {key}")
        except AppError as exc:
            logger.debug(f"Background refresh of {key} failed: {exc.message}")
        except Exception:
            logger.exception(f"Background refresh of {key} crashed")

    @property
    def pending_refreshes(self) -> int:
        return len(self._background)

    async def wait_background(self) -> None:
        """Wait for scheduled revalidations; used on shutdown and in tests."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
