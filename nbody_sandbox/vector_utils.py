#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

Vectors are plain (x, y) tuples. Bodies replace their position and velocity
tuples rather than mutating them, so a snapshot taken between steps stays valid.

Besides the arithmetic, `sign` drives the inward boundary push, `vec_rotate`
and `vec_perp` lay out the fragment fan and its sideways spacing, and
`vec_is_finite` backs Body validation.
"""
import math
from typing import Tuple

Vec2 = Tuple[float, float]

ZERO: Vec2 = (0.0, 0.0)


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def sign(x: float) -> float:
    """-1.0, 0.0 or 1.0; zero stays zero."""
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def vec_len_sq(a: Vec2) -> float:
    return a[0] * a[0] + a[1] * a[1]


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def vec_norm(a: Vec2) -> Vec2:
    """Unit vector along a; the zero vector normalizes to itself."""
    l = vec_len(a)
    if l == 0:
        return ZERO
    return (a[0] / l, a[1] / l)


def vec_dot(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def vec_perp(a: Vec2) -> Vec2:
    """Rotate a by +90 degrees."""
    return (-a[1], a[0])


def vec_rotate(a: Vec2, angle: float) -> Vec2:
    """Rotate a counter-clockwise by angle (radians)."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (a[0] * c - a[1] * s, a[0] * s + a[1] * c)


def vec_is_finite(a: Vec2) -> bool:
    return math.isfinite(a[0]) and math.isfinite(a[1])
