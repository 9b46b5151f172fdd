"""윈도 캐시 파일입니다. / Best-effort on-disk cache of repaired windows."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..base import TrackerBaseModel
from .repair import RepairedWindow

LOGGER = logging.getLogger("telemetry.window_cache")


class CachedWindow(TrackerBaseModel):
    """캐시된 윈도 레코드입니다. / Cached window record."""

    generated_at: datetime
    window: RepairedWindow


class WindowCacheFile:
    """윈도 캐시 파일 접근자입니다. / Window cache file accessor.

    Every failure is reported as a miss; nothing here raises.
    """

    def __init__(self, path: Path, max_age_seconds: int) -> None:
        self.path = path
        self.max_age_seconds = max_age_seconds

    def read(self, now: Optional[datetime] = None) -> Optional[RepairedWindow]:
        """신선한 윈도를 읽습니다. / Read a fresh cached window, if any."""

        if not self.path.exists():
            return None
        try:
            record = CachedWindow.model_validate_json(
                self.path.read_text(encoding="utf-8")
            )
        except (OSError, ValueError, ValidationError) as exc:
            LOGGER.warning(
                "window_cache_unreadable",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return None
        current = now or datetime.now(timezone.utc)
        generated_at = record.generated_at
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=timezone.utc)
        age = (current - generated_at).total_seconds()
        if age > self.max_age_seconds or not record.window.snapshots:
            LOGGER.info("window_cache_stale", extra={"age_seconds": age})
            return None
        return record.window

    def write(self, window: RepairedWindow, now: Optional[datetime] = None) -> bool:
        """윈도를 원자적으로 씁니다. / Write the window atomically."""

        record = CachedWindow(
            generated_at=now or datetime.now(timezone.utc),
            window=window,
        )
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(record.model_dump_json(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            LOGGER.warning(
                "window_cache_write_failed",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return False
        return True
