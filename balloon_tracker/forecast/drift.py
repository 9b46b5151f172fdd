"""바람 표류 갱신입니다. / Wind drift update."""

from __future__ import annotations

import math
from typing import Tuple

from ..config import DriftSettings

# Keeps the meridian correction finite at the poles.
_MIN_COS_LATITUDE = 1e-6


def normalize_longitude(longitude: float) -> float:
    """경도를 [-180, 180)으로 정규화합니다. / Normalize into [-180, 180)."""

    return (longitude + 180.0) % 360.0 - 180.0


def travel_bearing(direction_deg: float) -> float:
    """기상 풍향을 진행 방위로 바꿉니다. / Wind FROM direction to travel bearing."""

    return (direction_deg + 180.0) % 360.0


def drift_step(
    latitude: float,
    longitude: float,
    speed_mps: float,
    direction_deg: float,
    settings: DriftSettings,
) -> Tuple[float, float]:
    """한 시간 표류를 적용합니다. / Apply one hourly drift update.

    The displacement magnitude in degrees is ``speed_mps * k``. The eastward
    component is divided by ``cos(latitude)`` when the meridian correction is
    enabled.
    """

    bearing = math.radians(travel_bearing(direction_deg))
    magnitude = speed_mps * settings.k_degrees_per_mps
    latitude_change = magnitude * math.cos(bearing)
    longitude_change = magnitude * math.sin(bearing)
    if settings.meridian_correction:
        cos_latitude = max(_MIN_COS_LATITUDE, math.cos(math.radians(latitude)))
        longitude_change /= cos_latitude
    new_latitude = max(-90.0, min(90.0, latitude + latitude_change))
    new_longitude = normalize_longitude(longitude + longitude_change)
    return new_latitude, new_longitude
