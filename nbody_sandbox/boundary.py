#!/usr/bin/env python3
"""
Boundary containment for the gravity sandbox.

Bodies are kept inside a W x H viewport with the origin at (0, 0):
- Hard constraint: position is clamped to [margin, W - margin] x [margin, H - margin].
- Soft constraint: on each axis independently, velocity gains a push toward
  the center of magnitude strength / d^3, where d is the distance from the
  clamped position to the nearer edge on that axis.

The clamp runs first, so d is never smaller than the margin and the push
cannot divide by zero.
"""
from typing import Iterable, Optional, Tuple

from .constants import BOUNDARY_MARGIN, BOUNDARY_STRENGTH
from .data_models import Body
from .vector_utils import clamp, sign


class BoundaryContainment:
    def __init__(self, strength: float = BOUNDARY_STRENGTH, margin: float = BOUNDARY_MARGIN):
        self.strength = float(strength)
        self.margin = max(1e-6, float(margin))

    def usable(self, viewport: Optional[Tuple[float, float]]) -> bool:
        if viewport is None:
            return False
        w, h = viewport
        return w > 2 * self.margin and h > 2 * self.margin

    def axis_push(self, p: float, size: float) -> float:
        """Inward velocity increment for a (clamped) coordinate p on an axis of length size."""
        d = min(abs(p), abs(size - p))
        d = max(d, self.margin)
        return -sign(p - size / 2.0) * self.strength / (d ** 3)

    def apply(self, bodies: Iterable[Body], viewport: Optional[Tuple[float, float]]) -> None:
        """Clamp then push every body; no-op without a usable viewport."""
        if not self.usable(viewport):
            return
        w, h = viewport
        m = self.margin
        for body in bodies:
            x = clamp(body.position[0], m, w - m)
            y = clamp(body.position[1], m, h - m)
            body.position = (x, y)
            body.velocity = (
                body.velocity[0] + self.axis_push(x, w),
                body.velocity[1] + self.axis_push(y, h),
            )
