"""Tests for carousel physics/layout and artwork URL helpers."""

import pytest

from animelog.utils.artwork import (
    artwork_rank_key,
    normalize_backdrop_url,
    normalize_thumb_url,
    tmdb_image_url,
    usable_url,
)
from animelog.utils.carousel import (
    STACK_MAX_X,
    CarouselPhysics,
    layout_cards,
    spread_start,
    stack_offset,
)


def test_stack_offset_grows_and_saturates() -> None:
    offsets = [stack_offset(depth) for depth in range(0, 50)]
    assert offsets[0] == 0
    assert all(b > a for a, b in zip(offsets, offsets[1:]))
    assert offsets[-1] < STACK_MAX_X


def test_spring_settles_on_target() -> None:
    physics = CarouselPhysics(10)
    physics.set_target(4)
    frames = physics.run_until_settled()
    assert frames < 600
    assert physics.settled
    assert physics.position == 4


def test_target_is_clamped_to_card_range() -> None:
    physics = CarouselPhysics(3)
    physics.set_target(99)
    assert physics.target == 2
    physics.set_target(-5)
    assert physics.target == 0


def test_drag_left_advances_and_release_snaps() -> None:
    physics = CarouselPhysics(10)
    physics.begin_drag()
    physics.drag(-150)
    assert physics.target == pytest.approx(1.25)
    assert 0 < physics.position < physics.target
    assert not physics.settled
    physics.release()
    assert physics.target == 1


def test_wheel_ticks_are_capped() -> None:
    physics = CarouselPhysics(10)
    physics.wheel(10_000)
    assert physics.target == pytest.approx(0.55)


def test_layout_stacks_cards_outside_window() -> None:
    assert spread_start(10, 0) == 3
    cards = layout_cards(10, 0)
    stacked = [card.index for card in cards if card.stacked]
    assert stacked == [0, 1, 2]
    assert cards[3].x == 0
    assert cards[4].x == 92
    assert cards[0].z < cards[2].z < cards[3].z


def test_fractional_position_blends_between_frames() -> None:
    low = layout_cards(10, 1)
    high = layout_cards(10, 2)
    mid = layout_cards(10, 1.5)
    for a, b, m in zip(low, high, mid):
        assert m.x == pytest.approx((a.x + b.x) / 2)
    assert layout_cards(0, 0) == []


def test_backdrop_and_thumb_urls() -> None:
    url = "https://image.tmdb.org/t/p/original/abc.jpg"
    assert normalize_backdrop_url(url) == "https://image.tmdb.org/t/p/w1280/abc.jpg"
    assert normalize_thumb_url(url) == "https://image.tmdb.org/t/p/w500/abc.jpg"
    assert normalize_backdrop_url("https://cdn.example/x.jpg") == "https://cdn.example/x.jpg"
    assert normalize_backdrop_url(None) is None
    assert tmdb_image_url("abc.jpg", "w780") == "https://image.tmdb.org/t/p/w780/abc.jpg"


def test_artwork_ranking_prefers_primary_then_votes() -> None:
    rows = [
        {"url": "b", "is_primary": False, "vote": 9.0, "width": 1920},
        {"url": "a", "is_primary": True, "vote": 1.0, "width": 800},
        {"url": "c", "is_primary": False, "vote": 9.0, "width": 3840},
    ]
    assert [row["url"] for row in sorted(rows, key=artwork_rank_key)] == ["a", "c", "b"]
    assert usable_url({"url": "  "}) is None
