"""경로 기하 후처리입니다. / Path geometry post-processing.

Both transforms are pure and total: they never raise and never mutate their
input. Longitudes are kept in [-180, 180).
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ..forecast.drift import normalize_longitude
from ..forecast.models import TrajectoryPoint

DEFAULT_INTERPOLATION_POINTS = 5
DEFAULT_GAP_THRESHOLD = 45.0
DEFAULT_SMOOTHING_WINDOW = 3


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def _unwrapped_longitudes(start: float, end: float) -> Tuple[float, float]:
    """최단 경로 경도 쌍입니다. / Longitudes shifted onto the shortest arc."""

    if abs(end - start) > 180:
        if end > start:
            start += 360
        else:
            end += 360
    return start, end


def _is_gap(
    current: TrajectoryPoint, following: TrajectoryPoint, threshold: float
) -> bool:
    """데이터 단절 여부입니다. / Whether a pair spans a data discontinuity."""

    start_lon, end_lon = _unwrapped_longitudes(current.longitude, following.longitude)
    latitude_delta = abs(following.latitude - current.latitude)
    longitude_delta = abs(end_lon - start_lon)
    return latitude_delta > threshold or longitude_delta > threshold


def lerp_point(
    start: TrajectoryPoint, end: TrajectoryPoint, t: float
) -> TrajectoryPoint:
    """두 점 사이를 보간합니다. / Interpolate between two points."""

    start_lon, end_lon = _unwrapped_longitudes(start.longitude, end.longitude)
    return TrajectoryPoint(
        latitude=_lerp(start.latitude, end.latitude, t),
        longitude=normalize_longitude(_lerp(start_lon, end_lon, t)),
        altitude=_lerp(start.altitude, end.altitude, t),
        hour=math.floor(_lerp(start.hour, end.hour, t)),
        is_forecast=start.is_forecast,
    )


def interpolate(
    points: Sequence[TrajectoryPoint],
    k: int = DEFAULT_INTERPOLATION_POINTS,
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
) -> List[TrajectoryPoint]:
    """연속 쌍 사이에 점을 넣습니다. / Insert ``k`` points between each pair.

    Pairs further apart than ``gap_threshold`` degrees in latitude or
    shortest-arc longitude are passed through without intermediate points.
    """

    if len(points) < 2:
        return list(points)
    result: List[TrajectoryPoint] = []
    for current, following in zip(points, points[1:]):
        result.append(current)
        if _is_gap(current, following, gap_threshold):
            continue
        for step in range(1, k + 1):
            result.append(lerp_point(current, following, step / (k + 1)))
    result.append(points[-1])
    return result


def continuous_runs(
    points: Sequence[TrajectoryPoint],
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
) -> List[List[TrajectoryPoint]]:
    """단절 없는 구간들로 나눕니다. / Split a path at its data discontinuities.

    Consecutive pairs further apart than ``gap_threshold`` degrees start a new
    run, using the same test as ``interpolate``.
    """

    runs: List[List[TrajectoryPoint]] = []
    for point in points:
        if runs and not _is_gap(runs[-1][-1], point, gap_threshold):
            runs[-1].append(point)
        else:
            runs.append([point])
    return runs


def _relative_longitude(reference: float, longitude: float) -> float:
    """기준 쪽으로 옮긴 경도입니다. / Longitude moved to the reference's side."""

    delta = longitude - reference
    if delta > 180:
        return longitude - 360
    if delta < -180:
        return longitude + 360
    return longitude


def _window_mean(
    window: Sequence[TrajectoryPoint], center: TrajectoryPoint
) -> TrajectoryPoint:
    """창 평균 점입니다. / Mean of a window, keeping the center's labels."""

    size = len(window)
    longitudes = [
        _relative_longitude(center.longitude, point.longitude) for point in window
    ]
    return TrajectoryPoint(
        latitude=sum(point.latitude for point in window) / size,
        longitude=normalize_longitude(sum(longitudes) / size),
        altitude=sum(point.altitude for point in window) / size,
        hour=center.hour,
        is_forecast=center.is_forecast,
    )


def smooth(
    points: Sequence[TrajectoryPoint],
    window: int = DEFAULT_SMOOTHING_WINDOW,
) -> List[TrajectoryPoint]:
    """이동 평균으로 평활화합니다. / Centered moving-average smoothing.

    The first and last points are fixed anchors.
    """

    if len(points) < max(window, 3):
        return list(points)
    half = window // 2
    result: List[TrajectoryPoint] = [points[0]]
    for index in range(1, len(points) - 1):
        start = max(0, index - half)
        end = min(len(points), index + half + 1)
        result.append(_window_mean(points[start:end], points[index]))
    result.append(points[-1])
    return result


def split_segments(
    points: Sequence[TrajectoryPoint],
) -> Tuple[List[TrajectoryPoint], List[TrajectoryPoint]]:
    """과거와 예보 구간으로 나눕니다. / Split into historical and forecast parts.

    The last historical point also opens the forecast segment so the two
    drawn segments join up.
    """

    for index, point in enumerate(points):
        if point.is_forecast:
            historical = list(points[:index])
            forecast = list(points[index:])
            if historical:
                forecast.insert(0, historical[-1])
            return historical, forecast
    return list(points), []
