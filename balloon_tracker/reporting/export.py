"""출력 계약 내보내기입니다. / Pipeline output contract export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..base import TrackerBaseModel
from ..telemetry.repair import RepairedWindow
from ..tracking.assembly import FleetReport

SNAPSHOTS_FILE = "snapshots.json"
TRAJECTORIES_FILE = "trajectories.json"


class ExportResult(TrackerBaseModel):
    """내보낸 파일 경로입니다. / Paths of exported files."""

    snapshots_path: Path
    trajectories_path: Path


def snapshots_payload(window: RepairedWindow) -> List[List[List[float]]]:
    """시간별 스냅샷 페이로드입니다. / Hourly snapshots payload."""

    return window.to_contract()


def trajectories_payload(report: FleetReport) -> Dict[str, Any]:
    """궤적 페이로드입니다. / Per-balloon trajectories payload."""

    return {
        "generated_at": report.generated_at.isoformat(),
        "forecast_unavailable": list(report.forecast_unavailable),
        "trajectories": report.trajectories_contract(),
    }


def write_json(path: Path, payload: Any) -> Path:
    """JSON 파일을 씁니다. / Write a JSON file."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, allow_nan=False), encoding="utf-8")
    return path


def export_report(report: FleetReport, directory: Path) -> ExportResult:
    """보고서를 내보냅니다. / Export snapshots and trajectories."""

    return ExportResult(
        snapshots_path=write_json(
            directory / SNAPSHOTS_FILE, snapshots_payload(report.window)
        ),
        trajectories_path=write_json(
            directory / TRAJECTORIES_FILE, trajectories_payload(report)
        ),
    )
