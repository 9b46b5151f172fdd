"""트래커 기반 모델 정의입니다. / Base definitions for tracker models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class TrackerBaseModel(BaseModel):
    """트래커 공통 베이스 모델입니다. / Common tracker base model."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
    )

    def model_dump_jsonable(self, **kwargs: Any) -> dict[str, Any]:
        """JSON 직렬화 가능한 덤프입니다. / Dump JSON-serializable dict."""

        data = self.model_dump(mode="json", by_alias=True, **kwargs)
        return data
