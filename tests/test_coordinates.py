"""좌표 검증기 테스트입니다. / Coordinate validator tests."""

from __future__ import annotations

import math

from hypothesis import given
from hypothesis import strategies as st

from balloon_tracker.telemetry.coordinates import SENTINEL, Position, is_valid, sanitize


def test_is_valid_accepts_numeric_triples() -> None:
    """숫자 세 개를 허용합니다. / Accepts numeric triples."""

    assert is_valid([10, 20, 5])
    assert is_valid((10.5, -20.25, 0.0))
    assert is_valid(Position(latitude=1.0, longitude=2.0, altitude=3.0))


def test_is_valid_rejects_malformed_values() -> None:
    """잘못된 값을 거부합니다. / Rejects malformed values."""

    assert not is_valid([0, 0, 0])
    assert not is_valid(SENTINEL)
    assert not is_valid([1, 2])
    assert not is_valid([1, 2, 3, 4])
    assert not is_valid([1, "2", 3])
    assert not is_valid([True, 2, 3])
    assert not is_valid([float("nan"), 2, 3])
    assert not is_valid([float("inf"), 2, 3])
    assert not is_valid(None)
    assert not is_valid("1,2,3")
    assert not is_valid([10**400, 1, 1])


def test_sanitize_uses_fallback_components() -> None:
    """NaN 성분을 대체합니다. / Replaces NaN components from fallback."""

    fallback = Position(latitude=1.0, longitude=2.0, altitude=3.0)
    repaired = sanitize([float("nan"), 30, float("nan")], fallback)
    assert repaired == Position(latitude=1.0, longitude=30.0, altitude=3.0)


def test_sanitize_without_fallback_uses_zero() -> None:
    """대체값이 없으면 0입니다. / Uses zero without a fallback."""

    repaired = sanitize([float("nan"), 30, 6])
    assert repaired == Position(latitude=0.0, longitude=30.0, altitude=6.0)
    assert is_valid(repaired)


def test_sanitize_ignores_validity() -> None:
    """유효성과 무관하게 동작합니다. / Works independently of validity."""

    assert sanitize([0, 0, 0]) == SENTINEL
    assert not is_valid(sanitize([0, 0, 0]))


def test_sanitize_malformed_resolves_to_fallback() -> None:
    """형식 오류는 대체값입니다. / Malformed input resolves to the fallback."""

    fallback = Position(latitude=5.0, longitude=6.0, altitude=7.0)
    assert sanitize([1, 2], fallback) == fallback
    assert sanitize("bad", fallback) == fallback
    assert sanitize(None) == SENTINEL


def test_sanitize_out_of_range_integer_resolves_to_fallback() -> None:
    """float 범위를 넘는 정수는 대체값입니다. / Oversized ints use the fallback."""

    fallback = Position(latitude=5.0, longitude=6.0, altitude=7.0)
    assert sanitize([10**400, 1, 1], fallback) == fallback
    assert sanitize([1, -(10**400), 1]) == SENTINEL


components = st.one_of(
    st.floats(allow_nan=True, allow_infinity=True),
    st.integers(min_value=-1000, max_value=1000),
)
fallbacks = st.one_of(
    st.none(),
    st.builds(
        Position,
        latitude=st.floats(-90, 90),
        longitude=st.floats(-180, 180),
        altitude=st.floats(0, 40000),
    ),
)


@given(
    position=st.lists(components, min_size=3, max_size=3),
    fallback=fallbacks,
)
def test_sanitize_is_idempotent(position: list, fallback: Position | None) -> None:
    """정제는 멱등입니다. / Sanitize is idempotent."""

    once = sanitize(position, fallback)
    assert sanitize(once, fallback) == once
    assert not any(math.isnan(value) for value in once.as_list())
