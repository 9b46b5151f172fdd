"""환경 및 설정 로더입니다. / Environment and configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import Field, SecretStr, ValidationError

from .base import TrackerBaseModel

DEFAULT_CONFIG_PATH = Path("config.yaml")


class TelemetrySettings(TrackerBaseModel):
    """텔레메트리 원천 설정입니다. / Upstream telemetry source settings."""

    base_url: str = "https://a.windbornesystems.com/treasure"
    hours: int = Field(default=24, ge=1)
    order: Literal["oldest_first", "newest_first"] = "oldest_first"
    timeout_seconds: float = Field(default=10.0, gt=0)
    retries: int = Field(default=3, ge=0)
    backoff_seconds: float = Field(default=1.0, ge=0)
    max_backoff_seconds: float = Field(default=8.0, ge=0)
    max_concurrency: int = Field(default=6, ge=1)


class WindowCacheSettings(TrackerBaseModel):
    """윈도 캐시 파일 설정입니다. / Whole-window cache file settings."""

    path: Optional[Path] = None
    max_age_seconds: int = Field(default=600, ge=0)


class ProviderSettings(TrackerBaseModel):
    """개별 바람 제공자 설정입니다. / Individual wind provider settings."""

    name: str
    adapter: str
    base_url: str = "https://api.openweathermap.org"
    timeout_seconds: float = Field(default=5.0, gt=0)
    retries: int = Field(default=3, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0)
    horizon_hours: int = Field(default=24, ge=1)
    api_key: str | None = None
    secret_suffix: str | None = Field(default=None, exclude=True)


class DriftSettings(TrackerBaseModel):
    """표류 모델 보정값입니다. / Drift model calibration.

    ``k_degrees_per_mps`` converts a wind speed in m/s into degrees of
    position change per forecast hour. It is an empirical calibration, not a
    physical constant.
    """

    k_degrees_per_mps: float = Field(default=0.036, gt=0)
    meridian_correction: bool = True


class GeometrySettings(TrackerBaseModel):
    """경로 후처리 설정입니다. / Path post-processing settings."""

    interpolation_points: int = Field(default=5, ge=0)
    gap_threshold_degrees: float = Field(default=45.0, gt=0)
    smoothing_window: int = Field(default=3, ge=1)


class TrackingSettings(TrackerBaseModel):
    """함대 추적 실행 설정입니다. / Fleet tracking run settings."""

    max_concurrency: int = Field(default=8, ge=1)
    forecast_limit: Optional[int] = Field(default=None, ge=0)


class ProviderSecret(TrackerBaseModel):
    """제공자 시크릿 래퍼입니다. / Provider secret wrapper."""

    api_key: SecretStr | None = None


def _default_providers() -> List[ProviderSettings]:
    return [ProviderSettings(name="mock", adapter="mock")]


class AppConfig(TrackerBaseModel):
    """애플리케이션 전체 설정입니다. / Application wide configuration."""

    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    window_cache: WindowCacheSettings = Field(default_factory=WindowCacheSettings)
    providers: List[ProviderSettings] = Field(default_factory=_default_providers)
    provider_order: List[str] = Field(default_factory=lambda: ["mock"])
    drift: DriftSettings = Field(default_factory=DriftSettings)
    geometry: GeometrySettings = Field(default_factory=GeometrySettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)

    def provider_by_name(self, name: str) -> ProviderSettings:
        """이름으로 제공자를 찾습니다. / Find provider by name."""

        for provider in self.providers:
            if provider.name == name:
                return provider
        raise KeyError(f"Unknown provider: {name}")


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """YAML 설정을 읽습니다. / Load YAML configuration."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def load_secrets_from_env(raw: Dict[str, Any]) -> Dict[str, ProviderSecret]:
    """환경 변수에서 시크릿을 적재합니다. / Load secrets from environment."""

    mapping: Dict[str, ProviderSecret] = {}
    for provider in raw.get("providers", []):
        suffix = provider.get("secret_suffix")
        if not suffix:
            continue
        raw_value = os.getenv(f"WIND_API_KEY_{suffix}")
        secret = SecretStr(raw_value) if raw_value else None
        mapping[suffix] = ProviderSecret(api_key=secret)
    return mapping


def merge_config(
    raw: Dict[str, Any], secrets: Dict[str, ProviderSecret]
) -> Dict[str, Any]:
    """환경과 파일 설정을 병합합니다. / Merge file config with secrets."""

    providers = raw.get("providers", [])
    for provider in providers:
        suffix = provider.get("secret_suffix")
        if suffix and suffix in secrets:
            secret_value = secrets[suffix].api_key
            if secret_value:
                provider["api_key"] = secret_value.get_secret_value()
    return raw


def load_app_config(path: Path | None = None) -> AppConfig:
    """최종 앱 설정을 반환합니다. / Return final app configuration."""

    if path is None and not DEFAULT_CONFIG_PATH.exists():
        return AppConfig()
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise ValueError(f"Config file not found: {config_path}")
    raw = load_yaml_config(config_path)
    secrets = load_secrets_from_env(raw)
    merged = merge_config(raw, secrets)
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
