"""운영자용 CLI입니다. / Operator-facing CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from .config import load_app_config
from .forecast.models import Trajectory, TrajectoryPoint
from .geometry.paths import smooth
from .logging_setup import setup_logging
from .reporting.export import export_report, snapshots_payload, write_json
from .reporting.markdown import build_report
from .telemetry.repair import RepairedWindow, TotalDataLossError
from .telemetry.source import create_telemetry_service
from .tracking.assembly import FleetReport, build_forecaster, create_fleet_tracker

app = typer.Typer(help="Balloon Tracker CLI")


@app.callback()
def main_options(
    log_level: str = typer.Option("WARNING", help="Log level for pipeline logs"),
) -> None:
    """공통 옵션입니다. / Common options."""

    setup_logging(log_level)


def _print_window(window: RepairedWindow) -> None:
    """윈도 요약을 출력합니다. / Print window summary."""

    lines = [
        "Hour | Slots | Readings",
        "-----|-------|---------",
    ]
    for hour, snapshot in zip(window.hours, window.snapshots):
        readings = sum(1 for position in snapshot if not position.is_sentinel)
        lines.append(f"-{hour:02d}h | {len(snapshot)} | {readings}")
    typer.echo("\n".join(lines))


def _print_points(points: List[TrajectoryPoint]) -> None:
    """궤적을 출력합니다. / Print trajectory points."""

    lines = [
        "Hour | Latitude | Longitude | Altitude | Forecast",
        "-----|----------|-----------|----------|---------",
    ]
    for point in points:
        lines.append(
            f"{point.hour:+03d} | {point.latitude:.4f} | {point.longitude:.4f} | "
            f"{point.altitude:.2f} | {'YES' if point.is_forecast else 'NO'}"
        )
    typer.echo("\n".join(lines))


@app.command("fetch-window")
def fetch_window(
    output: Optional[Path] = typer.Option(None, help="Write snapshots JSON here"),
) -> None:
    """텔레메트리 윈도를 가져옵니다. / Fetch and repair the telemetry window."""

    config = load_app_config()
    service = create_telemetry_service(config)
    try:
        window = asyncio.run(service.load_window())
    except TotalDataLossError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _print_window(window)
    if output is not None:
        write_json(output, snapshots_payload(window))
        typer.echo(f"\nSnapshots saved to {output}")


@app.command("forecast")
def forecast(
    lat: float,
    lon: float,
    altitude: float,
    smoothed: bool = typer.Option(False, "--smooth/--no-smooth"),
) -> None:
    """한 원점을 예보합니다. / Forecast the drift path of one origin."""

    config = load_app_config()
    forecaster = build_forecaster(config)

    async def _run() -> Optional[Trajectory]:
        return await forecaster.forecast(lat, lon, altitude)

    trajectory = asyncio.run(_run())
    if trajectory is None:
        typer.echo("Forecast unavailable")
        raise typer.Exit(code=1)
    points = trajectory.points
    if smoothed:
        points = smooth(points, config.geometry.smoothing_window)
    _print_points(points)


@app.command("track")
def track(
    limit: Optional[int] = typer.Option(None, help="Maximum balloons to forecast"),
    output_dir: Path = typer.Option(Path("outputs"), help="Output directory"),
) -> None:
    """전체 파이프라인을 실행합니다. / Run the full tracking pipeline."""

    config = load_app_config()
    if limit is not None:
        config = config.model_copy(
            update={
                "tracking": config.tracking.model_copy(update={"forecast_limit": limit})
            }
        )
    tracker = create_fleet_tracker(config)

    async def _run() -> FleetReport:
        return await tracker.run()

    try:
        report = asyncio.run(_run())
    except TotalDataLossError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    exported = export_report(report, output_dir)
    summary = build_report(report, config, output_dir)
    typer.echo(
        f"Tracks: {len(report.tracks)} | Forecasts: {report.forecast_count} | "
        f"Unavailable: {len(report.forecast_unavailable)}"
    )
    typer.echo(f"Snapshots saved to {exported.snapshots_path}")
    typer.echo(f"Trajectories saved to {exported.trajectories_path}")
    typer.echo(f"Report saved to {summary.path}")


def main() -> None:
    """CLI 엔트리 포인트입니다. / CLI entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI guard
    main()
