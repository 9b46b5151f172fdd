"""바람 제공자 어댑터입니다. / Wind provider adapters."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import ProviderSettings
from .models import WindForecast, WindObservation

LOGGER = logging.getLogger("weather.providers")


class WindProviderError(Exception):
    """바람 제공자 오류입니다. / Wind provider error."""


class WindProvider(ABC):
    """바람 제공자 인터페이스입니다. / Wind provider interface."""

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        """제공자 이름을 돌려줍니다. / Return provider name."""

        return self.settings.name

    async def fetch_forecast(self, lat: float, lon: float) -> WindForecast:
        """바람 예보를 조회합니다. / Fetch wind forecast for an origin."""

        try:
            return await self._request_with_retry(lat, lon)
        except WindProviderError:
            raise
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "provider_error",
                extra={"provider": self.name, "error": str(exc)},
            )
            raise WindProviderError(str(exc)) from exc

    async def _request_with_retry(self, lat: float, lon: float) -> WindForecast:
        """리트라이 포함 요청입니다. / Perform request with retry."""

        retryer = AsyncRetrying(
            wait=wait_exponential(
                multiplier=self.settings.backoff_seconds,
                max=self.settings.backoff_seconds * 8,
            ),
            stop=stop_after_attempt(max(self.settings.retries, 1)),
            retry=retry_if_exception_type(httpx.HTTPError),
            reraise=True,
        )
        try:
            forecast: WindForecast | None = None
            async for attempt in retryer:
                with attempt:
                    forecast = await self._fetch_remote(lat, lon)
                    break
        except RetryError as exc:
            raise WindProviderError(str(exc)) from exc
        if forecast is None:  # pragma: no cover - safety net
            raise WindProviderError("Retry loop produced no result")
        return forecast

    @abstractmethod
    async def _fetch_remote(self, lat: float, lon: float) -> WindForecast:
        """원격 데이터를 가져옵니다. / Fetch remote data."""


class BaseHttpProvider(WindProvider):
    """HTTP 기반 제공자입니다. / HTTP based provider."""

    path: str = "/forecast"

    async def _fetch_remote(self, lat: float, lon: float) -> WindForecast:
        """HTTP 호출을 실행합니다. / Execute HTTP call."""

        params = self.build_params(lat, lon)
        timeout = httpx.Timeout(self.settings.timeout_seconds)
        async with httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=timeout,
        ) as client:
            response = await client.get(
                self.path,
                params=params,
                headers={"accept": "application/json"},
            )
            response.raise_for_status()
            payload = response.json()
        return self.parse_payload(lat, lon, payload)

    @abstractmethod
    def build_params(self, lat: float, lon: float) -> Dict[str, Any]:
        """요청 파라미터를 구성합니다. / Build request parameters."""

    @abstractmethod
    def parse_payload(
        self, lat: float, lon: float, payload: Dict[str, Any]
    ) -> WindForecast:
        """응답 페이로드를 파싱합니다. / Parse response payload."""


class OpenWeatherMapAdapter(BaseHttpProvider):
    """OpenWeatherMap 어댑터입니다. / OpenWeatherMap forecast adapter."""

    path = "/data/2.5/forecast"

    def build_params(self, lat: float, lon: float) -> Dict[str, Any]:
        """OpenWeatherMap 파라미터입니다. / OpenWeatherMap parameters."""

        params: Dict[str, Any] = {
            "lat": f"{lat:.4f}",
            "lon": f"{lon:.4f}",
            "cnt": 40,
        }
        if self.settings.api_key:
            params["appid"] = self.settings.api_key
        return params

    def parse_payload(
        self, lat: float, lon: float, payload: Dict[str, Any]
    ) -> WindForecast:
        """OpenWeatherMap 응답을 변환합니다. / Transform OpenWeatherMap response."""

        observations = [
            WindObservation(
                timestamp=datetime.fromtimestamp(int(item["dt"]), tz=timezone.utc),
                speed_mps=float(item["wind"]["speed"]),
                direction_deg=float(item["wind"]["deg"]),
            )
            for item in payload["list"]
        ]
        return WindForecast(
            latitude=lat,
            longitude=lon,
            observations=observations,
            provenance=self.name,
        )


class MockWindProvider(WindProvider):
    """모의 바람 제공자입니다. / Synthetic wind provider for offline runs.

    Generates a smooth random walk of wind speed and direction. The generator
    is seeded from the origin rounded to two decimals, so the same origin
    always yields the same observations.
    """

    async def _fetch_remote(self, lat: float, lon: float) -> WindForecast:
        """모의 예보를 생성합니다. / Generate a synthetic forecast."""

        rng = random.Random(f"{lat:.2f},{lon:.2f}")
        start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        speed = 5 + rng.random() * 10
        direction = rng.random() * 360
        observations: List[WindObservation] = []
        for hour in range(self.settings.horizon_hours):
            speed += (rng.random() - 0.5) * 2
            speed = max(2.0, min(20.0, speed))
            direction = (direction + (rng.random() - 0.5) * 20) % 360
            observations.append(
                WindObservation(
                    timestamp=start + timedelta(hours=hour),
                    speed_mps=speed,
                    direction_deg=direction,
                )
            )
        return WindForecast(
            latitude=lat,
            longitude=lon,
            observations=observations,
            provenance=self.name,
        )


ADAPTER_REGISTRY: Dict[str, type[WindProvider]] = {
    "openweathermap": OpenWeatherMapAdapter,
    "mock": MockWindProvider,
}


class WindService:
    """바람 서비스 파사드입니다. / Wind service facade."""

    def __init__(self, providers: List[WindProvider]) -> None:
        self.providers = providers

    async def fetch(self, lat: float, lon: float) -> WindForecast:
        """폴백 체인을 수행합니다. / Perform fallback chain."""

        errors: List[str] = []
        for provider in self.providers:
            try:
                LOGGER.info("provider_attempt", extra={"provider": provider.name})
                return await provider.fetch_forecast(lat, lon)
            except WindProviderError as exc:
                LOGGER.warning(
                    "provider_failed",
                    extra={"provider": provider.name, "error": str(exc)},
                )
                errors.append(f"{provider.name}: {exc}")
                continue
        raise WindProviderError("; ".join(errors) or "All providers failed")


def create_provider(settings: ProviderSettings) -> WindProvider:
    """설정으로 제공자를 만듭니다. / Build provider from settings."""

    try:
        adapter_cls = ADAPTER_REGISTRY[settings.adapter]
    except KeyError as exc:
        raise ValueError(f"Unknown adapter: {settings.adapter}") from exc
    return adapter_cls(settings)
