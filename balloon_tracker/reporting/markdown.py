"""마크다운 리포트 빌더입니다. / Markdown report builder."""

from __future__ import annotations

from pathlib import Path

from ..base import TrackerBaseModel
from ..config import AppConfig
from ..tracking.assembly import FleetReport


class MarkdownReport(TrackerBaseModel):
    """마크다운 리포트 데이터입니다. / Markdown report data."""

    content: str
    path: Path


def format_markdown(report: FleetReport, config: AppConfig) -> str:
    """마크다운 문자열을 만듭니다. / Build markdown string."""

    window = report.window
    first_hour = window.first_populated_hour()
    unavailable = ", ".join(str(slot) for slot in report.forecast_unavailable)
    lines = [
        f"# Fleet Report: {report.generated_at.isoformat()}",
        "",
        "## Telemetry Window",
        f"- Hours Processed: {len(window.hours)}",
        f"- Hours With Data: {window.hours_with_data}",
        f"- Slots: {window.balloon_count}",
        (
            f"- First Populated Hour: -{first_hour}h"
            if first_hour is not None
            else "- First Populated Hour: none"
        ),
        "",
        "## Forecast",
        f"- Tracks: {len(report.tracks)}",
        f"- Forecasts Available: {report.forecast_count}",
        f"- Forecast Unavailable: {unavailable or 'none'}",
        "",
        "## Calibration",
        f"- Drift K (deg per m/s): {config.drift.k_degrees_per_mps:.3f}",
        f"- Meridian Correction: {'ON' if config.drift.meridian_correction else 'OFF'}",
        f"- Interpolation Points: {config.geometry.interpolation_points}",
        f"- Gap Threshold (deg): {config.geometry.gap_threshold_degrees:.1f}",
        f"- Smoothing Window: {config.geometry.smoothing_window}",
    ]
    return "\n".join(lines).strip() + "\n"


def build_report(
    report: FleetReport, config: AppConfig, directory: Path
) -> MarkdownReport:
    """리포트를 생성합니다. / Build markdown report file."""

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"fleet_{report.generated_at:%Y%m%dT%H%M}.md"
    content = format_markdown(report, config)
    path.write_text(content, encoding="utf-8")
    return MarkdownReport(content=content, path=path)
