"""Segmented progress ring geometry.

The ring is split into at most ``segment_cap`` wedges, each covering a
contiguous run of episode/chapter numbers. A wedge is filled once every unit
in its run has been consumed. Angles are in degrees, clockwise from 12
o'clock; paths are SVG annular wedges.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_SEGMENT_CAP = 120
DEFAULT_GAP_DEG = 1.1
# Gap may eat at most this share of a wedge so arcs never collapse.
MAX_GAP_SHARE = 0.8
# A single arc cannot close on itself in SVG.
_MAX_SWEEP = 359.99


@dataclass(frozen=True)
class RingSegment:
    index: int
    start: int
    end: int
    filled: bool
    start_angle: float
    end_angle: float
    path: str

    @property
    def is_placeholder(self) -> bool:
        return self.end == 0


@dataclass(frozen=True)
class Ring:
    current: int
    total: int
    size: float
    stroke: float
    segments: list[RingSegment]

    @property
    def filled_count(self) -> int:
        return sum(1 for s in self.segments if s.filled)


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def segment_count(total: int, segment_cap: int = DEFAULT_SEGMENT_CAP) -> int:
    return max(1, min(total, max(1, segment_cap)))


def segment_ranges(total: int, segment_cap: int = DEFAULT_SEGMENT_CAP) -> list[tuple[int, int]]:
    """Partition ``1..total`` into balanced contiguous ranges.

    Range sizes differ by at most one. ``total == 0`` gives a single
    ``(0, 0)`` placeholder.
    """
    if total <= 0:
        return [(0, 0)]
    n = segment_count(total, segment_cap)
    return [
        (_ceil_div(i * total, n) + 1, _ceil_div((i + 1) * total, n))
        for i in range(n)
    ]


def is_segment_filled(segment_range: tuple[int, int], current: int) -> bool:
    _, high = segment_range
    return high > 0 and high <= current


def clamp_gap(gap_deg: float, segments: int) -> float:
    width = 360.0 / max(1, segments)
    return max(0.0, min(gap_deg, width * MAX_GAP_SHARE))


def _point(cx: float, cy: float, radius: float, angle_deg: float) -> tuple[float, float]:
    rad = math.radians(angle_deg)
    return cx + radius * math.sin(rad), cy - radius * math.cos(rad)


def wedge_path(
    cx: float,
    cy: float,
    outer_r: float,
    inner_r: float,
    start_angle: float,
    end_angle: float,
) -> str:
    """SVG path of the annular slice between two radii."""
    sweep = min(end_angle - start_angle, _MAX_SWEEP)
    end_angle = start_angle + sweep
    large = 1 if sweep > 180 else 0

    ox0, oy0 = _point(cx, cy, outer_r, start_angle)
    ox1, oy1 = _point(cx, cy, outer_r, end_angle)
    ix1, iy1 = _point(cx, cy, inner_r, end_angle)
    ix0, iy0 = _point(cx, cy, inner_r, start_angle)
    return (
        f"M {ox0:.3f} {oy0:.3f} "
        f"A {outer_r:.3f} {outer_r:.3f} 0 {large} 1 {ox1:.3f} {oy1:.3f} "
        f"L {ix1:.3f} {iy1:.3f} "
        f"A {inner_r:.3f} {inner_r:.3f} 0 {large} 0 {ix0:.3f} {iy0:.3f} Z"
    )


def build_ring(
    current: int,
    total: int,
    *,
    segment_cap: int = DEFAULT_SEGMENT_CAP,
    gap_deg: float = DEFAULT_GAP_DEG,
    size: float = 215,
    stroke: float = 32,
) -> Ring:
    total = max(0, total)
    current = max(0, min(current, total))
    ranges = segment_ranges(total, segment_cap)
    n = len(ranges)
    width = 360.0 / n
    gap = clamp_gap(gap_deg, n)

    cx = cy = size / 2
    outer_r = size / 2
    inner_r = max(0.0, outer_r - stroke)

    segments: list[RingSegment] = []
    for i, rng in enumerate(ranges):
        start_angle = i * width + gap / 2
        end_angle = (i + 1) * width - gap / 2
        segments.append(
            RingSegment(
                index=i,
                start=rng[0],
                end=rng[1],
                filled=is_segment_filled(rng, current),
                start_angle=start_angle,
                end_angle=end_angle,
                path=wedge_path(cx, cy, outer_r, inner_r, start_angle, end_angle),
            )
        )
    return Ring(current=current, total=total, size=size, stroke=stroke, segments=segments)


def ring_label(current: int, total: int, hovered: RingSegment | None = None) -> str:
    """Centre label: the hovered wedge's range, otherwise ``current/total``."""
    if hovered is not None and not hovered.is_placeholder:
        if hovered.start == hovered.end:
            return str(hovered.start)
        return f"{hovered.start}–{hovered.end}"
    return f"{current}/{total}"


def segment_at(ring: Ring, x: float, y: float) -> RingSegment | None:
    """Hit-test a point in ring coordinates; gaps and the hole hit nothing."""
    cx = cy = ring.size / 2
    dx, dy = x - cx, y - cy
    distance = math.hypot(dx, dy)
    outer_r = ring.size / 2
    if distance > outer_r or distance < outer_r - ring.stroke:
        return None

    angle = math.degrees(math.atan2(dx, -dy)) % 360.0
    for segment in ring.segments:
        if segment.start_angle <= angle <= segment.end_angle:
            return segment
    return None


def render_ring_svg(
    ring: Ring,
    *,
    filled_color: str = "#0EA5E9",
    empty_color: str = "#d1d5db",
    label: str | None = None,
) -> str:
    """Serialise the ring as a standalone SVG document."""
    size = f"{ring.size:g}"
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" '
        f'viewBox="0 0 {size} {size}" role="img" aria-label="Progress">'
    ]
    for segment in ring.segments:
        color = filled_color if segment.filled else empty_color
        parts.append(
            f'<path d="{segment.path}" fill="{color}" '
            f'data-range="{segment.start}-{segment.end}"/>'
        )
    text = label if label is not None else ring_label(ring.current, ring.total)
    half = ring.size / 2
    parts.append(
        f'<text x="{half:g}" y="{half:g}" text-anchor="middle" '
        f'dominant-baseline="central">{text}</text>'
    )
    parts.append("</svg>")
    return "".join(parts)
