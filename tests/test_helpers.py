import math

import pytest

from coinrungen.helpers import (
    Color,
    Rectangle,
    Vector2,
    check_collision,
    get_collision_overlap,
    rotated_scaled_aabb,
    to_lower,
)


def _inside(inner: Rectangle, outer: Rectangle) -> bool:
    eps = 1e-9
    return (
        inner.x >= outer.x - eps
        and inner.y >= outer.y - eps
        and inner.x + inner.width <= outer.x + outer.width + eps
        and inner.y + inner.height <= outer.y + outer.height + eps
    )


def test_identity_transform_keeps_rectangle():
    rect = Rectangle(1.5, -2.0, 3.0, 4.0)
    box = rotated_scaled_aabb(rect, 0.0, 1.0)
    assert box.x == pytest.approx(rect.x)
    assert box.y == pytest.approx(rect.y)
    assert box.width == pytest.approx(rect.width)
    assert box.height == pytest.approx(rect.height)


def test_scaling_keeps_center_and_scales_size():
    rect = Rectangle(2.0, 3.0, 4.0, 6.0)
    box = rotated_scaled_aabb(rect, 0.0, 2.0)
    assert box.width == pytest.approx(rect.width * 2.0)
    assert box.height == pytest.approx(rect.height * 2.0)
    assert box.x + box.width / 2 == pytest.approx(rect.x + rect.width / 2)
    assert box.y + box.height / 2 == pytest.approx(rect.y + rect.height / 2)


def test_quarter_turn_swaps_sides():
    rect = Rectangle(0.0, 0.0, 4.0, 2.0)
    box = rotated_scaled_aabb(rect, math.pi / 2, 1.0)
    assert box.width == pytest.approx(rect.height)
    assert box.height == pytest.approx(rect.width)


def test_rotated_box_contains_original_center():
    rect = Rectangle(-1.0, 5.0, 2.0, 3.0)
    box = rotated_scaled_aabb(rect, 0.7, 0.5)
    cx = rect.x + rect.width / 2
    cy = rect.y + rect.height / 2
    assert box.x <= cx <= box.x + box.width
    assert box.y <= cy <= box.y + box.height


def test_collision_overlapping_and_symmetric():
    a = Rectangle(0.0, 0.0, 2.0, 2.0)
    b = Rectangle(1.0, 1.0, 2.0, 2.0)
    assert check_collision(a, b) is True
    assert check_collision(b, a) is True


def test_touching_edges_do_not_collide():
    a = Rectangle(0.0, 0.0, 1.0, 1.0)
    b = Rectangle(1.0, 0.0, 1.0, 1.0)
    assert check_collision(a, b) is False
    assert check_collision(b, a) is False


def test_overlap_of_disjoint_is_zero():
    a = Rectangle(0.0, 0.0, 1.0, 1.0)
    b = Rectangle(5.0, 5.0, 1.0, 1.0)
    assert get_collision_overlap(a, b) == Rectangle(0.0, 0.0, 0.0, 0.0)


def test_overlap_of_identical_is_the_rectangle():
    a = Rectangle(2.0, 3.0, 1.5, 2.5)
    assert get_collision_overlap(a, Rectangle(2.0, 3.0, 1.5, 2.5)) == a


@pytest.mark.parametrize(
    "r1, r2",
    [
        (Rectangle(0.0, 0.0, 2.0, 2.0), Rectangle(1.0, 1.0, 2.0, 2.0)),
        (Rectangle(1.0, 1.0, 2.0, 2.0), Rectangle(0.0, 0.0, 2.0, 2.0)),
        (Rectangle(0.0, 1.0, 2.0, 2.0), Rectangle(1.0, 0.0, 2.0, 2.0)),
        (Rectangle(1.0, 0.0, 2.0, 2.0), Rectangle(0.0, 1.0, 2.0, 2.0)),
        (Rectangle(0.0, 0.0, 10.0, 10.0), Rectangle(2.0, 3.0, 1.0, 1.0)),
        (Rectangle(0.2, 0.3, 1.0, 2.0), Rectangle(0.0, 0.0, 1.0, 1.0)),
    ],
)
def test_overlap_lies_within_both(r1, r2):
    overlap = get_collision_overlap(r1, r2)
    assert overlap.width > 0.0
    assert overlap.height > 0.0
    assert _inside(overlap, r1)
    assert _inside(overlap, r2)


def test_overlap_of_contained_rectangle_is_inner():
    outer = Rectangle(0.0, 0.0, 10.0, 10.0)
    inner = Rectangle(2.0, 3.0, 1.0, 1.0)
    assert get_collision_overlap(outer, inner) == inner


def test_to_lower_ascii_only():
    assert to_lower("HeLLo") == "hello"
    assert to_lower("ÄB") == "Äb"


def test_to_lower_idempotent():
    text = "Grass Snow STONE"
    assert to_lower(to_lower(text)) == to_lower(text)


def test_dataclass_defaults_round_trip():
    v = Vector2(1.0, 2.0)
    v.x += 1.0
    assert v == Vector2(2.0, 2.0)
    assert Color(1, 2, 3) == Color(1, 2, 3, 255)