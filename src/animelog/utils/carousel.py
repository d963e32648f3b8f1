"""Stacked episode carousel: spring physics and card layout.

Cards left of the focused window collapse into a stack whose offsets grow
logarithmically with depth; the window itself is spread at full card width.
Positions are fractional indices so the layout can be interpolated between
whole-card frames.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

WINDOW_COUNT = 7
CARD_W = 92
STACK_MAX_X = 150
STACK_K = 22

SPRING_K = 0.18
SPRING_D = 0.74
MAX_VEL = 0.55
SNAP_EPS = 0.002
VEL_EPS = 0.002

DRAG_FOLLOW = 0.42
DRAG_SENSITIVITY_PX = 120
WHEEL_SENSITIVITY_PX = 520
WHEEL_TICK_MAX = 0.55
SNAP_ON_RELEASE = True


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def stack_offset(depth: float, max_offset: float = STACK_MAX_X, k: float = STACK_K) -> float:
    """Horizontal offset of a stacked card ``depth`` places behind the window."""
    if depth <= 0:
        return 0.0
    return max_offset * (1 - math.exp(-depth / k))


class CarouselPhysics:
    """Damped spring driving ``position`` toward ``target``.

    Both are fractional card indices clamped to ``[0, count - 1]``.
    """

    def __init__(
        self,
        count: int,
        position: float = 0.0,
        *,
        spring_k: float = SPRING_K,
        damping: float = SPRING_D,
        max_velocity: float = MAX_VEL,
    ) -> None:
        self.count = max(0, count)
        self.spring_k = spring_k
        self.damping = damping
        self.max_velocity = max_velocity
        self.position = self._bound(position)
        self.target = self.position
        self.velocity = 0.0
        self._dragging = False

    @property
    def max_index(self) -> float:
        return float(max(0, self.count - 1))

    @property
    def settled(self) -> bool:
        return (
            not self._dragging
            and abs(self.target - self.position) <= SNAP_EPS
            and abs(self.velocity) <= VEL_EPS
        )

    def _bound(self, value: float) -> float:
        return _clamp(value, 0.0, self.max_index)

    def set_target(self, target: float) -> None:
        self.target = self._bound(target)

    def step(self) -> float:
        """Advance one frame and return the new position."""
        velocity = (self.velocity + (self.target - self.position) * self.spring_k) * self.damping
        self.velocity = _clamp(velocity, -self.max_velocity, self.max_velocity)
        self.position = self._bound(self.position + self.velocity)

        if abs(self.target - self.position) < SNAP_EPS and abs(self.velocity) < VEL_EPS:
            self.position = self.target
            self.velocity = 0.0
        return self.position

    def run_until_settled(self, max_frames: int = 600) -> int:
        frames = 0
        while not self.settled and frames < max_frames:
            self.step()
            frames += 1
        return frames

    def begin_drag(self) -> None:
        self._dragging = True
        self.velocity = 0.0

    def drag(self, delta_px: float) -> None:
        """Follow a pointer drag; dragging left advances the carousel."""
        self._dragging = True
        moved = -delta_px / DRAG_SENSITIVITY_PX
        self.target = self._bound(self.target + moved)
        self.position = self._bound(self.position + (self.target - self.position) * DRAG_FOLLOW)

    def release(self, snap: bool = SNAP_ON_RELEASE) -> None:
        self._dragging = False
        if snap:
            self.target = self._bound(float(round(self.target)))

    def wheel(self, delta_px: float) -> None:
        tick = _clamp(delta_px / WHEEL_SENSITIVITY_PX, -WHEEL_TICK_MAX, WHEEL_TICK_MAX)
        self.target = self._bound(self.target + tick)


@dataclass(frozen=True)
class CardLayout:
    index: int
    x: float
    opacity: float
    scale: float
    z: int
    stacked: bool


def spread_start(count: int, base_index: int, window: int = WINDOW_COUNT) -> int:
    max_start = max(0, count - window)
    return int(_clamp(max_start - base_index, 0, max_start))


def _frame(count: int, base_index: int, window: int, card_w: float) -> list[CardLayout]:
    # Cards before ``start`` stack behind the first visible slot.
    start = spread_start(count, base_index, window)
    cards: list[CardLayout] = []
    for index in range(count):
        if index < start:
            depth = start - index
            spread = math.log1p(depth)
            cards.append(
                CardLayout(
                    index=index,
                    x=-stack_offset(depth),
                    opacity=_clamp(1 - spread * 0.12, 0.18, 1),
                    scale=_clamp(1 - spread * 0.02, 0.92, 1),
                    z=10000 - depth,
                    stacked=True,
                )
            )
        else:
            slot = index - start
            cards.append(
                CardLayout(
                    index=index,
                    x=slot * card_w,
                    opacity=1.0,
                    scale=1.0,
                    z=50000 + slot,
                    stacked=False,
                )
            )
    return cards


def layout_cards(
    count: int,
    position: float,
    window: int = WINDOW_COUNT,
    card_w: float = CARD_W,
) -> list[CardLayout]:
    """Lay out every card for a fractional carousel position.

    The floor and ceil frames are computed independently and blended by the
    fractional part; z-order follows whichever frame dominates.
    """
    if count <= 0:
        return []
    position = _clamp(position, 0.0, float(count - 1))
    low = math.floor(position)
    high = math.ceil(position)
    t = position - low

    a = _frame(count, low, window, card_w)
    if high == low:
        return a
    b = _frame(count, high, window, card_w)

    blended: list[CardLayout] = []
    for ca, cb in zip(a, b, strict=True):
        near = ca if t < 0.5 else cb
        blended.append(
            CardLayout(
                index=ca.index,
                x=ca.x + (cb.x - ca.x) * t,
                opacity=ca.opacity + (cb.opacity - ca.opacity) * t,
                scale=ca.scale + (cb.scale - ca.scale) * t,
                z=near.z,
                stacked=near.stacked,
            )
        )
    return blended
