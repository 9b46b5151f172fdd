"""좌표 검증기입니다. / Coordinate validator for balloon positions."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, List, Optional, Sequence

from ..base import TrackerBaseModel


class Position(TrackerBaseModel):
    """풍선 위치입니다. / Balloon position (degrees, degrees, altitude)."""

    latitude: float
    longitude: float
    altitude: float

    @classmethod
    def from_components(cls, components: Sequence[float]) -> "Position":
        """세 값으로 위치를 만듭니다. / Build position from three components."""

        latitude, longitude, altitude = components
        return cls(latitude=latitude, longitude=longitude, altitude=altitude)

    def as_list(self) -> List[float]:
        """[lat, lon, alt] 리스트입니다. / Return [lat, lon, alt] list."""

        return [self.latitude, self.longitude, self.altitude]

    @property
    def is_sentinel(self) -> bool:
        """센티널 여부입니다. / Whether this is the no-reading sentinel."""

        return self.latitude == 0 and self.longitude == 0 and self.altitude == 0


SENTINEL = Position(latitude=0.0, longitude=0.0, altitude=0.0)


def _components(position: Any) -> Optional[List[Any]]:
    """위치 유사 값을 리스트로 펼칩니다. / Unpack a position-like value."""

    if isinstance(position, Position):
        return position.as_list()
    if isinstance(position, (list, tuple)):
        return list(position)
    return None


def _is_number(value: Any) -> bool:
    """실수로 변환 가능한 숫자입니다. / Real number representable as a float."""

    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        float(value)
    except OverflowError:
        return False
    return True


def is_valid(position: Any) -> bool:
    """유효한 관측 위치인지 확인합니다. / Check for a valid observed position.

    Valid means exactly three numeric, finite components that are not the
    all-zero sentinel.
    """

    components = _components(position)
    if components is None or len(components) != 3:
        return False
    if not all(_is_number(value) for value in components):
        return False
    if not all(math.isfinite(value) for value in components):
        return False
    return not all(value == 0 for value in components)


def sanitize(position: Any, fallback: Optional[Position] = None) -> Position:
    """NaN 성분을 대체합니다. / Replace NaN components from the fallback.

    Each NaN component takes the matching component of ``fallback`` (or 0
    without one). Values that are not three numeric components cannot be
    repaired component-wise and resolve to ``fallback`` (or the sentinel).
    """

    components = _components(position)
    if (
        components is None
        or len(components) != 3
        or not all(_is_number(value) for value in components)
    ):
        return fallback if fallback is not None else SENTINEL
    base = fallback.as_list() if fallback is not None else [0.0, 0.0, 0.0]
    repaired = [
        base[index] if math.isnan(value) else float(value)
        for index, value in enumerate(components)
    ]
    return Position.from_components(repaired)
