"""스냅샷 복구 테스트입니다. / Snapshot repair pipeline tests."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from balloon_tracker.telemetry.coordinates import SENTINEL, Position, is_valid
from balloon_tracker.telemetry.repair import (
    SnapshotRepairPipeline,
    TotalDataLossError,
    repair_window,
)

NAN = float("nan")


def _pos(lat: float, lon: float, alt: float) -> Position:
    return Position(latitude=lat, longitude=lon, altitude=alt)


def test_shorter_hour_carries_slots_forward() -> None:
    """짧은 시간은 이전 위치를 이어받습니다. / Shorter hour carries slots."""

    raw = [
        [[10, 20, 5], [0, 0, 0], [NAN, 30, 6]],
        [[11, 21, 5]],
    ]
    hour_0, hour_1 = SnapshotRepairPipeline().run(raw)
    assert hour_0 == [_pos(10, 20, 5), SENTINEL, _pos(0, 30, 6)]
    assert len(hour_1) == 3
    assert hour_1[0] == _pos(11, 21, 5)
    assert hour_1[1] == hour_0[1]
    assert hour_1[2] == hour_0[2]


def test_invalid_reading_keeps_last_known_position() -> None:
    """잘못된 값은 마지막 위치를 씁니다. / Invalid reading keeps last known."""

    raw = [
        [[10, 20, 5]],
        [[0, 0, 0]],
        [[1, 2]],
        [["a", 2, 3]],
        [[NAN, 25, NAN]],
    ]
    repaired = SnapshotRepairPipeline().run(raw)
    assert repaired[1] == [_pos(10, 20, 5)]
    assert repaired[2] == [_pos(10, 20, 5)]
    assert repaired[3] == [_pos(10, 20, 5)]
    assert repaired[4] == [_pos(10, 25, 5)]


def test_absent_hour_is_frozen() -> None:
    """없는 시간은 고정됩니다. / Absent hour repeats the carried state."""

    raw = [[[1, 1, 1], [2, 2, 2]], None, {"error": "busy"}, [[3, 3, 3]]]
    repaired = SnapshotRepairPipeline().run(raw)
    assert repaired[1] == repaired[0]
    assert repaired[2] == repaired[0]
    assert repaired[3] == [_pos(3, 3, 3), _pos(2, 2, 2)]


def test_empty_first_hour_defaults_to_sentinel() -> None:
    """첫 시간 데이터가 없으면 센티널입니다. / Empty first hour is sentinel."""

    raw = [None, [], [[1, 2, 3], [0, 0, 0]]]
    repaired = SnapshotRepairPipeline().run(raw)
    assert repaired[0] == [SENTINEL, SENTINEL]
    assert repaired[1] == [SENTINEL, SENTINEL]
    assert repaired[2] == [_pos(1, 2, 3), SENTINEL]


def test_growing_counts_pad_earlier_hours() -> None:
    """늘어난 슬롯은 앞 시간을 채웁니다. / Later slots pad earlier hours."""

    raw = [[[1, 1, 1]], [[2, 2, 2], [3, 3, 3]]]
    repaired = SnapshotRepairPipeline().run(raw)
    assert [len(hour) for hour in repaired] == [2, 2]
    assert repaired[0][1] == SENTINEL


def test_runs_do_not_share_state() -> None:
    """실행 간 상태를 공유하지 않습니다. / Runs do not share state."""

    pipeline = SnapshotRepairPipeline()
    pipeline.run([[[5, 5, 5]]])
    repaired = pipeline.run([[[0, 0, 0]]])
    assert repaired == [[SENTINEL]]


def test_repair_window_reports_hours() -> None:
    """윈도 메타데이터를 보고합니다. / Window metadata is reported."""

    window = repair_window([2, 1, 0], [None, [[1, 2, 3]], [[4, 5, 6]]])
    assert window.hours == [2, 1, 0]
    assert window.hours_with_data == 2
    assert window.balloon_count == 1
    assert window.first_populated_hour() == 1
    assert window.slot_history(0)[0] == SENTINEL
    assert window.latest_positions() == [_pos(4, 5, 6)]
    assert window.to_contract()[2] == [[4.0, 5.0, 6.0]]


def test_repair_window_total_data_loss() -> None:
    """전체 손실은 오류입니다. / Total data loss is an error."""

    with pytest.raises(TotalDataLossError):
        repair_window([1, 0], [None, []])
    with pytest.raises(ValueError):
        repair_window([0], [])


component = st.one_of(
    st.floats(min_value=-90, max_value=90),
    st.just(NAN),
    st.just(0.0),
)
coordinate = st.one_of(
    st.lists(component, min_size=3, max_size=3),
    st.lists(component, max_size=5),
    st.just([0, 0, 0]),
    st.just("garbage"),
)
snapshot = st.one_of(st.none(), st.lists(coordinate, max_size=6))


@given(raw=st.lists(snapshot, min_size=1, max_size=6))
def test_repaired_hours_are_fixed_length_and_valid(raw: list) -> None:
    """복구 결과는 고정 길이입니다. / Repaired hours are fixed length."""

    repaired = SnapshotRepairPipeline().run(raw)
    longest = max((len(hour) for hour in raw if isinstance(hour, list)), default=0)
    assert len(repaired) == len(raw)
    for hour_index, hour in enumerate(repaired):
        assert len(hour) == longest
        for slot, position in enumerate(hour):
            earlier = [repaired[index][slot] for index in range(hour_index)]
            assert is_valid(position) or position == SENTINEL or position in earlier


def test_oversized_integer_is_carried_forward() -> None:
    """거대한 정수는 이전 위치로 대체됩니다. / Oversized ints carry forward."""

    hour_0, hour_1 = SnapshotRepairPipeline().run(
        [[[10**400, 1, 1], [1, 2, 3]], [[4, 5, 6], [10**400, 1, 1]]]
    )
    assert hour_0 == [SENTINEL, _pos(1, 2, 3)]
    assert hour_1 == [_pos(4, 5, 6), _pos(1, 2, 3)]


def test_latest_positions_use_smallest_offset() -> None:
    """최신 위치는 가장 작은 오프셋입니다. / Latest is the smallest offset."""

    raw = [[[30, 30, 5]], [[20, 20, 5]], [[10, 10, 5]]]
    newest_first = repair_window([0, 1, 2], raw)
    assert newest_first.latest_positions() == [_pos(30, 30, 5)]
    oldest_first = repair_window([2, 1, 0], raw)
    assert oldest_first.latest_positions() == [_pos(10, 10, 5)]
