"""정규화된 바람 모델입니다. / Normalized wind models."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from ..base import TrackerBaseModel


class WindObservation(TrackerBaseModel):
    """시간별 바람 관측입니다. / Hourly wind observation.

    ``direction_deg`` follows the meteorological convention: the direction
    the wind blows FROM.
    """

    timestamp: datetime
    speed_mps: float = Field(ge=0)
    direction_deg: float


class WindForecast(TrackerBaseModel):
    """바람 예보 묶음입니다. / Wind forecast for one origin."""

    latitude: float
    longitude: float
    observations: List[WindObservation]
    provenance: str

    def chronological(self) -> List[WindObservation]:
        """시간순 관측입니다. / Observations in chronological order."""

        return sorted(self.observations, key=lambda item: item.timestamp)
