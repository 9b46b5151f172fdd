"""스냅샷 복구 파이프라인입니다. / Snapshot repair pipeline.

Hourly snapshots identify balloons only by their index in the array. The
pipeline keeps a fixed-capacity slot table for the whole window so that every
repaired snapshot has the same length and each slot keeps its last known good
position across gaps, missing hours and shrinking inputs.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from pydantic import Field

from ..base import TrackerBaseModel
from .coordinates import SENTINEL, Position, is_valid, sanitize

LOGGER = logging.getLogger("telemetry.repair")


class TotalDataLossError(Exception):
    """전체 윈도 데이터 손실입니다. / No hour in the window produced data."""


def _is_list_shaped(raw: Any) -> bool:
    return isinstance(raw, (list, tuple))


class SlotTable:
    """슬롯별 마지막 유효 위치 표입니다. / Last known good position per slot."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._slots: List[Optional[Position]] = [None] * capacity

    def last_known(self, slot: int) -> Optional[Position]:
        """마지막 유효 위치입니다. / Last valid position for a slot."""

        return self._slots[slot]

    def adopt(self, slot: int, position: Position) -> None:
        """새 유효 위치를 채택합니다. / Adopt a new valid position."""

        self._slots[slot] = position

    def snapshot(self) -> List[Position]:
        """현재 상태를 스냅샷으로 만듭니다. / Emit the carried-forward state."""

        return [position or SENTINEL for position in self._slots]


class RepairedWindow(TrackerBaseModel):
    """복구된 시간 윈도입니다. / Repaired window of hourly snapshots.

    ``hours`` holds the upstream hour offset (hours before now) for each
    snapshot, in processing order.
    """

    hours: List[int]
    snapshots: List[List[Position]]
    hours_with_data: int = Field(ge=0)

    @property
    def balloon_count(self) -> int:
        """슬롯 수입니다. / Number of slots per snapshot."""

        return len(self.snapshots[0]) if self.snapshots else 0

    def slot_history(self, slot: int) -> List[Position]:
        """슬롯의 시간순 위치입니다. / Positions of one slot in hour order."""

        return [snapshot[slot] for snapshot in self.snapshots]

    def latest_positions(self) -> List[Position]:
        """가장 최근 시간의 위치입니다. / Positions of the most recent hour.

        The most recent hour is the smallest offset, whichever order the
        window was processed in.
        """

        if not self.snapshots:
            return []
        return list(self.snapshots[self.hours.index(min(self.hours))])

    def first_populated_hour(self) -> Optional[int]:
        """처음으로 데이터가 있는 시간입니다. / First hour with a real reading."""

        for hour, snapshot in zip(self.hours, self.snapshots):
            if any(not position.is_sentinel for position in snapshot):
                return hour
        return None

    def to_contract(self) -> List[List[List[float]]]:
        """출력 계약 형태입니다. / Snapshots as nested [lat, lon, alt] lists."""

        return [
            [position.as_list() for position in snapshot]
            for snapshot in self.snapshots
        ]


class SnapshotRepairPipeline:
    """시간별 스냅샷 복구기입니다. / Repairs a window of raw hourly snapshots.

    Each ``run`` owns a fresh slot table, so runs never share state.
    """

    def run(self, raw_snapshots: Sequence[Any]) -> List[List[Position]]:
        """윈도를 순서대로 복구합니다. / Repair raw snapshots in order."""

        capacity = max(
            (len(raw) for raw in raw_snapshots if _is_list_shaped(raw)),
            default=0,
        )
        table = SlotTable(capacity)
        repaired: List[List[Position]] = []
        for index, raw in enumerate(raw_snapshots):
            if not _is_list_shaped(raw):
                LOGGER.warning("hour_frozen", extra={"index": index})
                repaired.append(table.snapshot())
                continue
            repaired.append(self._repair_hour(raw, table))
        return repaired

    def _repair_hour(self, raw: Sequence[Any], table: SlotTable) -> List[Position]:
        """한 시간을 복구합니다. / Repair one hour against the slot table."""

        hour: List[Position] = []
        rejected = 0
        for slot in range(table.capacity):
            fallback = table.last_known(slot)
            candidate = raw[slot] if slot < len(raw) else fallback
            sanitized = sanitize(candidate, fallback)
            if is_valid(sanitized):
                table.adopt(slot, sanitized)
                hour.append(sanitized)
            else:
                rejected += 1
                hour.append(fallback or SENTINEL)
        if rejected:
            LOGGER.info(
                "positions_carried_forward",
                extra={"rejected": rejected, "raw_length": len(raw)},
            )
        return hour


def _has_data(raw: Any) -> bool:
    return _is_list_shaped(raw) and len(raw) > 0


def repair_window(
    hours: Sequence[int],
    raw_snapshots: Sequence[Any],
    pipeline: SnapshotRepairPipeline | None = None,
) -> RepairedWindow:
    """시간 윈도를 복구합니다. / Repair a full window of raw snapshots.

    ``raw_snapshots[i]`` is the raw body for ``hours[i]``; ``None`` marks an
    absent hour. Raises ``TotalDataLossError`` when no hour produced data.
    """

    if len(hours) != len(raw_snapshots):
        raise ValueError("hours and raw_snapshots must have the same length")
    hours_with_data = sum(1 for raw in raw_snapshots if _has_data(raw))
    if hours_with_data == 0:
        LOGGER.error("total_data_loss", extra={"hours": len(hours)})
        raise TotalDataLossError("No valid data could be retrieved")
    snapshots = (pipeline or SnapshotRepairPipeline()).run(raw_snapshots)
    return RepairedWindow(
        hours=list(hours),
        snapshots=snapshots,
        hours_with_data=hours_with_data,
    )
