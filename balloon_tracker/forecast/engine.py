"""바람 표류 예보 엔진입니다. / Wind-drift forecast engine."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from ..config import DriftSettings
from ..weather.models import WindForecast, WindObservation
from ..weather.providers import WindProviderError
from .cache import ForecastCache, cache_key
from .drift import drift_step
from .models import Trajectory, TrajectoryPoint

LOGGER = logging.getLogger("forecast.engine")

DEFAULT_HORIZON_HOURS = 24


class WindSource(Protocol):
    """바람 데이터 원천 프로토콜입니다. / Wind data source protocol."""

    async def fetch(self, lat: float, lon: float) -> WindForecast:
        ...


def build_trajectory(
    lat: float,
    lon: float,
    altitude: float,
    observations: Sequence[WindObservation],
    settings: DriftSettings,
    horizon_hours: int = DEFAULT_HORIZON_HOURS,
) -> Trajectory:
    """관측으로 궤적을 만듭니다. / Extrapolate a trajectory from observations.

    Hour 0 is the seed position. Hour ``h`` applies observation ``h - 1``;
    when the sequence runs short the last observation is reused.
    """

    if not observations:
        raise ValueError("At least one wind observation is required")
    points: List[TrajectoryPoint] = [
        TrajectoryPoint(
            latitude=lat,
            longitude=lon,
            altitude=altitude,
            hour=0,
            is_forecast=True,
        )
    ]
    current_lat, current_lon = lat, lon
    for hour in range(1, horizon_hours + 1):
        observation = observations[min(hour - 1, len(observations) - 1)]
        current_lat, current_lon = drift_step(
            current_lat,
            current_lon,
            observation.speed_mps,
            observation.direction_deg,
            settings,
        )
        points.append(
            TrajectoryPoint(
                latitude=current_lat,
                longitude=current_lon,
                altitude=altitude,
                hour=hour,
                is_forecast=True,
            )
        )
    return Trajectory(points=points)


class Forecaster:
    """바람 표류 예보기입니다. / Wind-drift forecaster backed by a cache."""

    def __init__(
        self,
        wind: WindSource,
        cache: ForecastCache,
        drift: DriftSettings | None = None,
        horizon_hours: int = DEFAULT_HORIZON_HOURS,
    ) -> None:
        self.wind = wind
        self.cache = cache
        self.drift = drift or DriftSettings()
        self.horizon_hours = horizon_hours

    async def forecast(
        self, lat: float, lon: float, altitude: float
    ) -> Optional[Trajectory]:
        """예보 궤적을 반환합니다. / Return the forecast trajectory or ``None``.

        ``None`` means no forecast is available for this origin; callers
        fall back to the last known position.
        """

        key = cache_key(lat, lon)
        trajectory = await self.cache.get_or_compute(
            key, lambda: self._compute(lat, lon, altitude)
        )
        if trajectory is None:
            return None
        if trajectory.points[0].altitude != altitude:
            return trajectory.with_altitude(altitude)
        return trajectory

    async def _compute(
        self, lat: float, lon: float, altitude: float
    ) -> Optional[Trajectory]:
        """바람을 조회해 궤적을 계산합니다. / Fetch wind and extrapolate."""

        try:
            forecast = await self.wind.fetch(lat, lon)
        except WindProviderError as exc:
            LOGGER.warning(
                "forecast_unavailable",
                extra={"lat": lat, "lon": lon, "error": str(exc)},
            )
            return None
        observations = forecast.chronological()[: self.horizon_hours]
        if not observations:
            LOGGER.warning(
                "forecast_no_observations",
                extra={"lat": lat, "lon": lon, "provider": forecast.provenance},
            )
            return None
        LOGGER.info(
            "forecast_computed",
            extra={
                "key": cache_key(lat, lon),
                "observations": len(observations),
                "provider": forecast.provenance,
            },
        )
        return build_trajectory(
            lat, lon, altitude, observations, self.drift, self.horizon_hours
        )
