"""예보 캐시입니다. / Forecast cache with single-flight coordination."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, MutableMapping, Optional

from .models import Trajectory

LOGGER = logging.getLogger("forecast.cache")


def cache_key(lat: float, lon: float) -> str:
    """원점 캐시 키입니다. / Origin key quantized to two decimals."""

    return f"{lat:.2f},{lon:.2f}"


class ForecastCache:
    """원점별 궤적 캐시입니다. / Process-wide trajectory cache keyed by origin.

    Entries never expire. A key is written once with a complete trajectory,
    so readers see either nothing or the whole value. Concurrent misses for
    the same key share one in-flight computation.
    """

    def __init__(
        self, storage: Optional[MutableMapping[str, Trajectory]] = None
    ) -> None:
        self._store: MutableMapping[str, Trajectory] = (
            storage if storage is not None else {}
        )
        self._inflight: Dict[str, asyncio.Task[Optional[Trajectory]]] = {}
        self._lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _guard(self) -> asyncio.Lock:
        """현재 루프의 잠금입니다. / Lock bound to the running event loop.

        A new loop gets a fresh lock and drops in-flight tasks left by the old
        one, so the cache can outlive a single ``asyncio.run``.
        """

        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
            self._inflight = {}
        return self._lock

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, key: str) -> Optional[Trajectory]:
        """캐시에서 값을 가져옵니다. / Retrieve value from cache."""

        async with self._guard():
            return self._store.get(key)

    async def set(self, key: str, value: Trajectory) -> None:
        """캐시에 값을 저장합니다. / Store value in cache."""

        async with self._guard():
            self._store[key] = value

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Optional[Trajectory]]],
    ) -> Optional[Trajectory]:
        """캐시 조회 후 단일 비행 계산입니다. / Return cached value or compute once.

        A ``None`` result is not cached, so a later call retries.
        """

        async with self._guard():
            cached = self._store.get(key)
            if cached is not None:
                LOGGER.debug("forecast_cache_hit", extra={"key": key})
                return cached
            task = self._inflight.get(key)
            if task is None:
                task = asyncio.ensure_future(self._run(key, compute))
                self._inflight[key] = task
            else:
                LOGGER.debug("forecast_inflight_join", extra={"key": key})
        return await asyncio.shield(task)

    async def _run(
        self,
        key: str,
        compute: Callable[[], Awaitable[Optional[Trajectory]]],
    ) -> Optional[Trajectory]:
        """계산 후 저장합니다. / Compute and store the value."""

        try:
            value = await compute()
            if value is not None:
                await self.set(key, value)
            return value
        finally:
            async with self._guard():
                self._inflight.pop(key, None)
