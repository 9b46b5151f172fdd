"""폴백 체인 테스트입니다. / Fallback chain tests."""

from __future__ import annotations

import pytest
import respx

from balloon_tracker.config import ProviderSettings
from balloon_tracker.weather.providers import (
    MockWindProvider,
    OpenWeatherMapAdapter,
    WindProviderError,
    WindService,
)


def _owm_settings(base_url: str, retries: int) -> ProviderSettings:
    return ProviderSettings(
        name="owm",
        adapter="openweathermap",
        base_url=base_url,
        timeout_seconds=1.0,
        retries=retries,
        backoff_seconds=0.0,
    )


@pytest.mark.asyncio
async def test_fallback_uses_secondary_provider() -> None:
    """2차 제공자를 사용합니다. / Falls back to secondary provider."""

    primary = OpenWeatherMapAdapter(_owm_settings("https://fail.test", retries=2))
    secondary = MockWindProvider(ProviderSettings(name="mock", adapter="mock"))
    service = WindService([primary, secondary])
    with respx.mock() as mock:
        route = mock.get("https://fail.test/data/2.5/forecast").respond(status_code=500)
        forecast = await service.fetch(0.0, 0.0)
    assert forecast.provenance == "mock"
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_fallback_raises_when_all_fail() -> None:
    """모든 제공자 실패 시 예외입니다. / Raises when all providers fail."""

    provider = OpenWeatherMapAdapter(_owm_settings("https://fail-again.test", retries=0))
    service = WindService([provider])
    with respx.mock() as mock:
        mock.get("https://fail-again.test/data/2.5/forecast").respond(status_code=500)
        with pytest.raises(WindProviderError):
            await service.fetch(0.0, 0.0)
