"""바람 제공자 단위 테스트입니다. / Wind provider unit tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import respx

from balloon_tracker.config import ProviderSettings
from balloon_tracker.weather.providers import (
    MockWindProvider,
    OpenWeatherMapAdapter,
    WindProviderError,
    create_provider,
)


def _sample_provider_settings(
    name: str, adapter: str, base_url: str = "https://owm.test"
) -> ProviderSettings:
    """샘플 제공자 설정입니다. / Build sample provider settings."""

    return ProviderSettings(
        name=name,
        adapter=adapter,
        base_url=base_url,
        timeout_seconds=1.0,
        retries=1,
        backoff_seconds=0.0,
        api_key="test-key",
    )


@pytest.mark.asyncio
async def test_openweathermap_parses_payload() -> None:
    """OpenWeatherMap 파싱을 검증합니다. / Validate OpenWeatherMap parsing."""

    settings = _sample_provider_settings("owm", "openweathermap")
    provider = OpenWeatherMapAdapter(settings)
    start = int(datetime(2025, 9, 29, 12, 0, tzinfo=timezone.utc).timestamp())
    payload = {
        "list": [
            {"dt": start + 3600, "wind": {"speed": 7.5, "deg": 180}},
            {"dt": start, "wind": {"speed": 5.0, "deg": 90}},
        ]
    }
    with respx.mock(base_url=settings.base_url) as mock:
        route = mock.get("/data/2.5/forecast").respond(json=payload)
        forecast = await provider.fetch_forecast(25.0, 55.0)
    request = route.calls.last.request
    assert request.url.params["appid"] == "test-key"
    assert request.url.params["lat"] == "25.0000"
    assert forecast.provenance == "owm"
    ordered = forecast.chronological()
    assert ordered[0].speed_mps == pytest.approx(5.0)
    assert ordered[1].direction_deg == pytest.approx(180.0)


@pytest.mark.asyncio
async def test_openweathermap_malformed_payload_is_provider_error() -> None:
    """잘못된 응답은 제공자 오류입니다. / Malformed payload is a provider error."""

    provider = OpenWeatherMapAdapter(_sample_provider_settings("owm", "openweathermap"))
    with respx.mock(base_url="https://owm.test") as mock:
        mock.get("/data/2.5/forecast").respond(json={"list": [{"dt": 1}]})
        with pytest.raises(WindProviderError):
            await provider.fetch_forecast(0.0, 0.0)


@pytest.mark.asyncio
async def test_mock_provider_is_deterministic_per_origin() -> None:
    """모의 제공자는 원점별로 결정적입니다. / Mock provider is deterministic."""

    provider = MockWindProvider(_sample_provider_settings("mock", "mock"))
    first = await provider.fetch_forecast(10.001, 20.002)
    second = await provider.fetch_forecast(10.004, 19.998)
    other = await provider.fetch_forecast(-30.0, 120.0)
    assert len(first.observations) == 24
    assert [item.speed_mps for item in first.observations] == [
        item.speed_mps for item in second.observations
    ]
    assert [item.direction_deg for item in first.observations] != [
        item.direction_deg for item in other.observations
    ]
    assert all(2.0 <= item.speed_mps <= 20.0 for item in first.observations)
    assert all(0.0 <= item.direction_deg <= 360.0 for item in first.observations)


def test_create_provider_uses_registry() -> None:
    """레지스트리로 제공자를 만듭니다. / Builds providers from the registry."""

    assert isinstance(
        create_provider(_sample_provider_settings("mock", "mock")), MockWindProvider
    )
    with pytest.raises(ValueError):
        create_provider(_sample_provider_settings("x", "unknown"))
