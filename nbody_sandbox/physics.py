#!/usr/bin/env python3
"""
Core physics for the gravity sandbox.

Responsibilities
- Apply pairwise gravitational velocity impulses (GravitySolver).
- Keep every body's radius coupled to its mass (radius_for_mass, maintain_radii).
- Advance positions from velocities (apply_velocity).

Force law
- For a pair (i, j) the velocity of i changes by

      dv_i = G * dt / |r_ij|^2 * m_j * r_hat_ij

  where r_hat_ij points from i to j. This is a mass-weighted impulse rather
  than a force divided by the body's own mass, which keeps units simple.
  The pair's momentum changes are equal and opposite.
- Pairs closer than sqrt(min_separation_sq) are skipped instead of producing
  an infinite impulse.

Complexity
- Direct summation, O(N^2) per step. The sandbox deals with tens to low
  hundreds of bodies.
"""
import logging
import math
from typing import Iterable

from .body_store import BodyStore
from .constants import GRAVITATIONAL, MIN_SEPARATION_SQ, PI, RADIUS_COEFFICIENT
from .data_models import Body

logger = logging.getLogger("nbody_sandbox")


class GravitySolver:
    """
    Pairwise gravity with a configurable constant.

    The solver holds no body state; it reads positions and masses from the
    store and writes velocities back.
    """

    def __init__(self, gravitational: float = GRAVITATIONAL, min_separation_sq: float = MIN_SEPARATION_SQ):
        self.gravitational = float(gravitational)
        self.min_separation_sq = max(0.0, float(min_separation_sq))

    def set_gravitational(self, gravitational: float) -> None:
        self.gravitational = float(gravitational)

    def apply(self, store: BodyStore, dt: float) -> int:
        """
        Update every body's velocity from every other body.

        Returns the number of pairs skipped for being too close, which the
        caller may log; skipped pairs contribute nothing.
        """
        if dt <= 0:
            return 0
        bodies = list(store)
        n = len(bodies)
        skipped = 0
        for i in range(n):
            bi = bodies[i]
            xi, yi = bi.position
            for j in range(i + 1, n):
                bj = bodies[j]
                # Vector from body i to body j
                dx = bj.position[0] - xi
                dy = bj.position[1] - yi
                dist_sq = dx * dx + dy * dy
                if dist_sq < self.min_separation_sq:
                    skipped += 1
                    continue

                dist = math.sqrt(dist_sq)
                nx, ny = dx / dist, dy / dist
                f = self.gravitational * dt / dist_sq

                ai = f * bj.mass
                aj = f * bi.mass
                bi.velocity = (bi.velocity[0] + nx * ai, bi.velocity[1] + ny * ai)
                bj.velocity = (bj.velocity[0] - nx * aj, bj.velocity[1] - ny * aj)
        if skipped:
            logger.debug("Gravity skipped %d coincident pair(s)", skipped)
        return skipped


def radius_for_mass(mass: float, radius_coefficient: float = RADIUS_COEFFICIENT) -> float:
    """
    Radius of a body of the given mass.

    r = sqrt(m / (pi * C)); doubling the mass grows the radius by sqrt(2)
    only, so visual sizes compress at large mass.
    """
    return math.sqrt(mass / (PI * radius_coefficient))


def maintain_radii(bodies: Iterable[Body], radius_coefficient: float = RADIUS_COEFFICIENT) -> None:
    """Recompute every radius from scratch; never updated incrementally."""
    for body in bodies:
        body.radius = radius_for_mass(body.mass, radius_coefficient)


def apply_velocity(bodies: Iterable[Body], dt: float) -> None:
    """Explicit Euler position update: position += velocity * dt."""
    if dt <= 0:
        return
    for body in bodies:
        body.position = (
            body.position[0] + body.velocity[0] * dt,
            body.position[1] + body.velocity[1] * dt,
        )
