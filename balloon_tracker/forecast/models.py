"""궤적 모델입니다. / Trajectory models."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import Field

from ..base import TrackerBaseModel


class TrajectoryPoint(TrackerBaseModel):
    """궤적의 한 점입니다. / One point of a balloon trajectory."""

    latitude: float
    longitude: float
    altitude: float
    hour: int
    is_forecast: bool = Field(alias="isForecast")

    def to_contract(self) -> Dict[str, Any]:
        """출력 계약 딕셔너리입니다. / Point as an output contract dict."""

        return self.model_dump_jsonable()


class Trajectory(TrackerBaseModel):
    """시간순 궤적입니다. / Ordered trajectory of one balloon."""

    points: List[TrajectoryPoint]

    def with_altitude(self, altitude: float) -> "Trajectory":
        """고도를 바꾼 복사본입니다. / Copy with every altitude replaced."""

        return Trajectory(
            points=[
                point.model_copy(update={"altitude": altitude})
                for point in self.points
            ]
        )

    def to_contract(self) -> List[Dict[str, Any]]:
        """출력 계약 리스트입니다. / Trajectory as a list of contract dicts."""

        return [point.to_contract() for point in self.points]
