"""함대 궤적 조립기입니다. / Fleet trajectory assembly.

Joins each slot's repaired history with its wind-drift forecast and runs the
geometry post-processing. History hours are negative offsets from now (hour
0 is the latest snapshot); forecast hours continue from 1.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..base import TrackerBaseModel
from ..config import AppConfig, GeometrySettings, TrackingSettings
from ..forecast.cache import ForecastCache
from ..forecast.engine import Forecaster
from ..forecast.models import Trajectory, TrajectoryPoint
from ..geometry.paths import continuous_runs, interpolate, smooth
from ..telemetry.repair import RepairedWindow
from ..telemetry.source import TelemetryService, create_telemetry_service
from ..weather.providers import WindProvider, WindService, create_provider

LOGGER = logging.getLogger("tracking.assembly")


class BalloonTrack(TrackerBaseModel):
    """풍선 한 대의 궤적입니다. / Renderable track of one balloon."""

    slot: int
    points: List[TrajectoryPoint]
    forecast_available: bool


class FleetReport(TrackerBaseModel):
    """함대 실행 결과입니다. / Result of one fleet tracking run."""

    generated_at: datetime
    window: RepairedWindow
    tracks: List[BalloonTrack]
    forecast_unavailable: List[int]

    @property
    def forecast_count(self) -> int:
        """예보된 풍선 수입니다. / Number of balloons with a forecast."""

        return sum(1 for track in self.tracks if track.forecast_available)

    def trajectories_contract(self) -> Dict[str, List[Dict[str, Any]]]:
        """슬롯별 궤적 계약입니다. / Per-slot trajectories for the output."""

        return {
            str(track.slot): [point.to_contract() for point in track.points]
            for track in self.tracks
        }


def history_points(window: RepairedWindow, slot: int) -> List[TrajectoryPoint]:
    """슬롯의 과거 궤적입니다. / Historical points of one slot.

    Sentinel positions carry no reading and are left out.
    """

    points = [
        TrajectoryPoint(
            latitude=position.latitude,
            longitude=position.longitude,
            altitude=position.altitude,
            hour=-offset,
            is_forecast=False,
        )
        for offset, position in zip(window.hours, window.slot_history(slot))
        if not position.is_sentinel
    ]
    return sorted(points, key=lambda point: point.hour)


def join_forecast(
    history: List[TrajectoryPoint], forecast: Optional[Trajectory]
) -> List[TrajectoryPoint]:
    """과거와 예보를 잇습니다. / Append forecast hours after the history.

    The forecast seed (hour 0) repeats the latest historical position and is
    dropped.
    """

    if forecast is None:
        return list(history)
    return list(history) + [point for point in forecast.points if point.hour > 0]


def postprocess(
    points: List[TrajectoryPoint], settings: GeometrySettings
) -> List[TrajectoryPoint]:
    """구간별로 평활화 후 보간합니다. / Smooth and densify each continuous run.

    Runs are cut at gaps in the hourly points, so neither transform bridges a
    data outage.
    """

    threshold = settings.gap_threshold_degrees
    result: List[TrajectoryPoint] = []
    for run in continuous_runs(points, threshold):
        smoothed = smooth(run, settings.smoothing_window)
        result.extend(interpolate(smoothed, settings.interpolation_points, threshold))
    return result


class FleetTracker:
    """함대 추적 파이프라인입니다. / End-to-end fleet tracking pipeline."""

    def __init__(
        self,
        telemetry: TelemetryService,
        forecaster: Forecaster,
        geometry: GeometrySettings | None = None,
        tracking: TrackingSettings | None = None,
    ) -> None:
        self.telemetry = telemetry
        self.forecaster = forecaster
        self.geometry = geometry or GeometrySettings()
        self.tracking = tracking or TrackingSettings()

    def forecast_slots(self, window: RepairedWindow) -> List[int]:
        """예보 대상 슬롯입니다. / Slots whose latest position is a reading."""

        slots = [
            slot
            for slot, position in enumerate(window.latest_positions())
            if not position.is_sentinel
        ]
        limit = self.tracking.forecast_limit
        return slots if limit is None else slots[:limit]

    async def run(self) -> FleetReport:
        """파이프라인을 실행합니다. / Run the pipeline.

        Raises ``TotalDataLossError`` when the window has no data.
        """

        window = await self.telemetry.load_window()
        forecasts = await self._forecast_all(window)
        tracks: List[BalloonTrack] = []
        unavailable: List[int] = []
        for slot in range(window.balloon_count):
            history = history_points(window, slot)
            if not history:
                continue
            forecast = forecasts.get(slot)
            if slot in forecasts and forecast is None:
                unavailable.append(slot)
            tracks.append(
                BalloonTrack(
                    slot=slot,
                    points=postprocess(join_forecast(history, forecast), self.geometry),
                    forecast_available=forecast is not None,
                )
            )
        LOGGER.info(
            "fleet_assembled",
            extra={
                "tracks": len(tracks),
                "forecast_requested": len(forecasts),
                "forecast_unavailable": len(unavailable),
            },
        )
        return FleetReport(
            generated_at=datetime.now(timezone.utc),
            window=window,
            tracks=tracks,
            forecast_unavailable=unavailable,
        )

    async def _forecast_all(
        self, window: RepairedWindow
    ) -> Dict[int, Optional[Trajectory]]:
        """슬롯별 예보를 병렬 조회합니다. / Forecast every eligible slot."""

        latest = window.latest_positions()
        semaphore = asyncio.Semaphore(self.tracking.max_concurrency)

        async def _one(slot: int) -> Optional[Trajectory]:
            position = latest[slot]
            async with semaphore:
                return await self.forecaster.forecast(
                    position.latitude, position.longitude, position.altitude
                )

        slots = self.forecast_slots(window)
        results = await asyncio.gather(*(_one(slot) for slot in slots))
        return dict(zip(slots, results))


def build_wind_service(config: AppConfig) -> WindService:
    """바람 서비스를 생성합니다. / Build wind service."""

    providers: List[WindProvider] = []
    for name in config.provider_order:
        providers.append(create_provider(config.provider_by_name(name)))
    return WindService(providers)


def build_forecaster(config: AppConfig, cache: ForecastCache | None = None) -> Forecaster:
    """예보기를 생성합니다. / Build forecaster from config."""

    horizon = min(
        (config.provider_by_name(name).horizon_hours for name in config.provider_order),
        default=24,
    )
    return Forecaster(
        build_wind_service(config),
        cache if cache is not None else ForecastCache(),
        drift=config.drift,
        horizon_hours=horizon,
    )


def create_fleet_tracker(
    config: AppConfig, cache: ForecastCache | None = None
) -> FleetTracker:
    """설정으로 추적기를 만듭니다. / Build fleet tracker from config."""

    return FleetTracker(
        create_telemetry_service(config),
        build_forecaster(config, cache),
        geometry=config.geometry,
        tracking=config.tracking,
    )
