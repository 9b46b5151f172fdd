"""텔레메트리 원천 클라이언트입니다. / Upstream telemetry source client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Tuple

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import AppConfig, TelemetrySettings
from .parsing import UnrecoverablePayloadError, parse_snapshot_body
from .repair import RepairedWindow, SnapshotRepairPipeline, repair_window
from .window_cache import WindowCacheFile

LOGGER = logging.getLogger("telemetry.source")


class TelemetrySource:
    """시간별 스냅샷 원천입니다. / Per-hour snapshot source.

    Hour ``h`` is the snapshot taken ``h`` hours ago and lives at
    ``{base_url}/{h:02d}.json``.
    """

    def __init__(self, settings: TelemetrySettings) -> None:
        self.settings = settings

    def hour_offsets(self) -> List[int]:
        """처리 순서의 시간 오프셋입니다. / Hour offsets in processing order."""

        offsets = list(range(self.settings.hours))
        if self.settings.order == "oldest_first":
            offsets.reverse()
        return offsets

    async def fetch_window(self) -> Tuple[List[int], List[Any]]:
        """전체 윈도를 병렬로 가져옵니다. / Fetch all hours concurrently.

        Returns the hour offsets and raw bodies in processing order; an
        absent hour is ``None``.
        """

        hours = self.hour_offsets()
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)
        timeout = httpx.Timeout(self.settings.timeout_seconds)
        async with httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=timeout,
        ) as client:

            async def _bounded(hour: int) -> Any:
                async with semaphore:
                    return await self.fetch_hour(client, hour)

            raw = await asyncio.gather(*(_bounded(hour) for hour in hours))
        return hours, list(raw)

    async def fetch_hour(self, client: httpx.AsyncClient, hour: int) -> Optional[Any]:
        """한 시간을 가져옵니다. / Fetch one hour, ``None`` when absent."""

        try:
            return await self._request_with_retry(client, hour)
        except (httpx.HTTPError, UnrecoverablePayloadError) as exc:
            LOGGER.warning(
                "hour_absent",
                extra={"hour": hour, "error": str(exc)},
            )
            return None

    async def _request_with_retry(self, client: httpx.AsyncClient, hour: int) -> Any:
        """리트라이 포함 요청입니다. / Perform request with retry."""

        retryer = AsyncRetrying(
            wait=wait_exponential(
                multiplier=self.settings.backoff_seconds,
                max=self.settings.max_backoff_seconds,
            ),
            stop=stop_after_attempt(max(self.settings.retries, 1)),
            retry=retry_if_exception_type(
                (httpx.HTTPError, UnrecoverablePayloadError)
            ),
            reraise=True,
        )
        payload: Any = None
        async for attempt in retryer:
            with attempt:
                payload = await self._fetch_remote(client, hour)
        return payload

    async def _fetch_remote(self, client: httpx.AsyncClient, hour: int) -> Any:
        """HTTP 호출을 실행합니다. / Execute HTTP call."""

        response = await client.get(f"/{hour:02d}.json")
        if response.status_code == 404:
            LOGGER.info("hour_not_found", extra={"hour": hour})
            return []
        response.raise_for_status()
        return parse_snapshot_body(response.text)


class TelemetryService:
    """텔레메트리 서비스 파사드입니다. / Fetch, repair and cache a window."""

    def __init__(
        self,
        source: TelemetrySource,
        cache_file: WindowCacheFile | None = None,
        pipeline: SnapshotRepairPipeline | None = None,
    ) -> None:
        self.source = source
        self.cache_file = cache_file
        self.pipeline = pipeline or SnapshotRepairPipeline()

    async def load_window(self) -> RepairedWindow:
        """복구된 윈도를 반환합니다. / Return the repaired window.

        Raises ``TotalDataLossError`` when no hour produced data.
        """

        if self.cache_file is not None:
            cached = await asyncio.to_thread(self.cache_file.read)
            if cached is not None:
                LOGGER.info("window_cache_hit", extra={"path": str(self.cache_file.path)})
                return cached
        hours, raw = await self.source.fetch_window()
        window = repair_window(hours, raw, self.pipeline)
        LOGGER.info(
            "window_repaired",
            extra={
                "hours": len(hours),
                "hours_with_data": window.hours_with_data,
                "slots": window.balloon_count,
            },
        )
        if self.cache_file is not None:
            await asyncio.to_thread(self.cache_file.write, window)
        return window


def create_telemetry_service(config: AppConfig) -> TelemetryService:
    """설정으로 서비스를 만듭니다. / Build telemetry service from config."""

    cache_settings = config.window_cache
    cache_file = (
        WindowCacheFile(cache_settings.path, cache_settings.max_age_seconds)
        if cache_settings.path is not None
        else None
    )
    return TelemetryService(TelemetrySource(config.telemetry), cache_file=cache_file)
