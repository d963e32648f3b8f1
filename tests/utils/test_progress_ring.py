"""Tests for the segmented progress ring."""

import pytest

from animelog.utils.progress_ring import (
    build_ring,
    clamp_gap,
    is_segment_filled,
    render_ring_svg,
    ring_label,
    segment_at,
    segment_count,
    segment_ranges,
)


def test_ten_units_over_three_segments() -> None:
    assert segment_ranges(10, 3) == [(1, 4), (5, 7), (8, 10)]


@pytest.mark.parametrize(("total", "cap"), [(1, 120), (12, 12), (500, 120), (121, 120), (7, 3)])
def test_ranges_partition_all_units(total: int, cap: int) -> None:
    ranges = segment_ranges(total, cap)
    assert len(ranges) == segment_count(total, cap) == min(total, cap)
    assert ranges[0][0] == 1
    assert ranges[-1][1] == total
    for (_, high), (low, _) in zip(ranges, ranges[1:]):
        assert low == high + 1
    sizes = [high - low + 1 for low, high in ranges]
    assert max(sizes) - min(sizes) <= 1


def test_empty_total_has_single_placeholder() -> None:
    assert segment_ranges(0) == [(0, 0)]
    ring = build_ring(0, 0)
    assert len(ring.segments) == 1
    assert ring.segments[0].is_placeholder
    assert not ring.segments[0].filled


def test_segment_fills_only_when_whole_range_consumed() -> None:
    assert is_segment_filled((1, 4), 4)
    assert not is_segment_filled((5, 7), 6)
    assert not is_segment_filled((0, 0), 0)

    ring = build_ring(5, 10, segment_cap=3)
    assert [segment.filled for segment in ring.segments] == [True, False, False]


def test_current_is_clamped_to_total() -> None:
    ring = build_ring(40, 12)
    assert ring.current == 12
    assert ring.filled_count == 12


def test_gap_never_swallows_a_segment() -> None:
    assert clamp_gap(1.1, 12) == pytest.approx(1.1)
    assert clamp_gap(10, 400) == pytest.approx(360 / 400 * 0.8)
    assert clamp_gap(-3, 4) == 0


def test_single_segment_path_does_not_close_on_itself() -> None:
    ring = build_ring(1, 1, gap_deg=0)
    assert ring.segments[0].path.startswith("M ")
    assert ring.segments[0].path.endswith("Z")


def test_labels() -> None:
    ring = build_ring(3, 10, segment_cap=3)
    assert ring_label(3, 10) == "3/10"
    assert ring_label(3, 10, ring.segments[1]) == "5–7"
    single = build_ring(1, 3)
    assert ring_label(1, 3, single.segments[2]) == "3"


def test_hit_testing_finds_wedge_under_pointer() -> None:
    ring = build_ring(0, 4, size=200, stroke=20)
    # Lower right, inside the band: 135 degrees clockwise from 12 o'clock.
    hit = segment_at(ring, 163.6, 163.6)
    assert hit is not None and hit.index == 1
    assert segment_at(ring, 100, 100) is None
    assert segment_at(ring, 0, 0) is None


def test_svg_contains_one_path_per_segment() -> None:
    ring = build_ring(2, 4)
    svg = render_ring_svg(ring)
    assert svg.startswith("<svg")
    assert svg.count("<path") == 4
    assert 'data-range="1-1"' in svg
    assert ">2/4</text>" in svg
