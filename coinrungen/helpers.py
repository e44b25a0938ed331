"""Geometry primitives and small helpers shared by the game systems."""

from __future__ import annotations

import math
import string
from dataclasses import dataclass

UNIT_TO_PIXELS = 16.0
PIXELS_TO_UNIT = 1.0 / UNIT_TO_PIXELS

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


@dataclass
class Vector2:
    """A 2D point or direction."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class Rectangle:
    """An axis-aligned rectangle given by its top-left corner and size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass
class Color:
    """An 8-bit RGBA colour."""

    r: int = 255
    g: int = 255
    b: int = 255
    a: int = 255


def rotated_scaled_aabb(rectangle: Rectangle, rotation: float, scale: float) -> Rectangle:
    """Return the axis-aligned box around a rectangle rotated and scaled about its centre."""
    half_w = rectangle.width * 0.5
    half_h = rectangle.height * 0.5
    center_x = rectangle.x + half_w
    center_y = rectangle.y + half_h

    cos_rot = math.cos(rotation)
    sin_rot = math.sin(rotation)

    xs = [center_x]
    ys = [center_y]
    for sx in (-1, 1):
        for sy in (-1, 1):
            corner_x = half_w * sx * scale
            corner_y = half_h * sy * scale
            xs.append(center_x + cos_rot * corner_x - sin_rot * corner_y)
            ys.append(center_y + sin_rot * corner_x + cos_rot * corner_y)

    lower_x, upper_x = min(xs), max(xs)
    lower_y, upper_y = min(ys), max(ys)
    return Rectangle(lower_x, lower_y, upper_x - lower_x, upper_y - lower_y)


def check_collision(r1: Rectangle, r2: Rectangle) -> bool:
    """Return whether two rectangles overlap; touching edges do not count."""
    return (
        r1.x < r2.x + r2.width
        and r1.x + r1.width > r2.x
        and r1.y < r2.y + r2.height
        and r1.y + r1.height > r2.y
    )


def get_collision_overlap(r1: Rectangle, r2: Rectangle) -> Rectangle:
    """Return the overlapping area of two rectangles, or an all-zero rectangle."""
    if not check_collision(r1, r2):
        return Rectangle()

    dxx = abs(r1.x - r2.x)
    dyy = abs(r1.y - r2.y)
    res = Rectangle()

    if r1.x <= r2.x:
        res.x = r2.x
        res.width = r1.width - dxx
        if r1.y <= r2.y:
            res.y = r2.y
            res.height = r1.height - dyy
        else:
            res.y = r1.y
            res.height = r2.height - dyy
    else:
        res.x = r1.x
        res.width = r2.width - dxx
        if r1.y <= r2.y:
            res.y = r2.y
            res.height = r1.height - dyy
        else:
            res.y = r1.y
            res.height = r2.height - dyy

    if r1.width > r2.width:
        if res.width >= r2.width:
            res.width = r2.width
    elif res.width >= r1.width:
        res.width = r1.width

    if r1.height > r2.height:
        if res.height >= r2.height:
            res.height = r2.height
    elif res.height >= r1.height:
        res.height = r1.height

    return res


def to_lower(s: str) -> str:
    """Lower-case the ASCII letters of a string, leaving every other character alone."""
    return s.translate(_ASCII_LOWER)