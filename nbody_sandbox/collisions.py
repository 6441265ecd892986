#!/usr/bin/env python3
"""
Collision handling for the gravity sandbox.

Two bodies collide when their centers are no further apart than the sum of
their radii. Each collision either merges the pair or shatters one or both
bodies into fragments, decided by how much kinetic energy the impact carries
relative to what each body can absorb:

    ke1 = 0.5 * |v1 - v2|^2 * m2     (energy delivered to body 1)
    ke2 = 0.5 * |v1 - v2|^2 * m1     (energy delivered to body 2)
    ab_k = ke_threshold * m_k        (absorbable by body k)

- No body over its threshold: perfectly inelastic merge into the heavier body,
  placed at the mass-weighted centroid.
- A body over its threshold shatters. With d the dot product of the two
  normalized velocities and f = (1 - d) / 2:
      fan width  = f * max_spread_deg
      fragments  = min_fragments + round(f * (max_fragments - min_fragments))
  so glancing hits (d near +1) give a narrow fan of few pieces and head-on hits
  (d near -1) a wide fan of many. The count is lowered until each piece weighs
  at least min_fragment_mass; a body that cannot split into two is treated as
  absorbing the hit.

Every product starts at the common velocity P / M. Fragments add a fan speed
of sqrt(2 * (ke_k - ab_k) / m_k); the net momentum of all fans is then taken
back out of every product equally, so mass and momentum are both conserved.

Ordering: a body takes part in at most one collision per step. Pairs come from
the store as it was when resolution started; removals and new fragments are
committed after the pass and any remaining overlaps are handled next step.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from .body_store import BodyStore
from .constants import (
    KE_THRESHOLD,
    MAX_FRAGMENTS,
    MAX_SPREAD_DEG,
    MIN_FRAGMENT_MASS,
    MIN_FRAGMENTS,
    RADIUS_COEFFICIENT,
)
from .data_models import Body, CollisionEvent
from .physics import radius_for_mass
from .vector_utils import (
    Vec2,
    clamp,
    vec_add,
    vec_dot,
    vec_len_sq,
    vec_norm,
    vec_perp,
    vec_rotate,
    vec_scale,
    vec_sub,
)

logger = logging.getLogger("nbody_sandbox")


class CollisionSettings:
    """Container for collision-related settings."""
    def __init__(self, enable: bool = True, ke_threshold: float = KE_THRESHOLD,
                 min_fragments: int = MIN_FRAGMENTS, max_fragments: int = MAX_FRAGMENTS,
                 min_fragment_mass: float = MIN_FRAGMENT_MASS, max_spread_deg: float = MAX_SPREAD_DEG,
                 radius_coefficient: float = RADIUS_COEFFICIENT):
        self.enable = enable
        self.ke_threshold = float(ke_threshold)
        self.min_fragments = max(2, int(min_fragments))
        self.max_fragments = max(self.min_fragments, int(max_fragments))
        self.min_fragment_mass = max(1e-9, float(min_fragment_mass))
        self.max_spread = math.radians(clamp(float(max_spread_deg), 0.0, 180.0))
        self.radius_coefficient = float(radius_coefficient)


@dataclass
class _Shatter:
    body: Body
    count: int
    spread: float
    speed: float
    direction: Vec2


def spread_fraction(v1: Vec2, v2: Vec2) -> float:
    """0 for parallel velocities, 1 for opposed ones; 0.5 if either is zero."""
    dot = clamp(vec_dot(vec_norm(v1), vec_norm(v2)), -1.0, 1.0)
    return (1.0 - dot) / 2.0


def fragment_count(fraction: float, mass: float, settings: CollisionSettings) -> int:
    """Pieces a body of this mass shatters into; below 2 means it does not shatter."""
    span = settings.max_fragments - settings.min_fragments
    n = settings.min_fragments + int(round(clamp(fraction, 0.0, 1.0) * span))
    by_mass = int(mass // settings.min_fragment_mass)
    return min(n, by_mass)


def fan_directions(center: Vec2, count: int, spread: float) -> List[Vec2]:
    """count unit vectors evenly covering a fan of width spread around center."""
    if count == 1:
        return [center]
    step = spread / (count - 1)
    start = -spread / 2.0
    return [vec_rotate(center, start + i * step) for i in range(count)]


def resolve_pair(b1: Body, b2: Body, settings: CollisionSettings) -> Optional[Tuple[str, List[Body], List[int]]]:
    """
    Resolve one colliding pair in place.

    Returns (kind, new_bodies, removed_ids), or None when the pair is skipped
    because both bodies move with the same velocity.
    """
    if b1.velocity == b2.velocity:
        return None

    vr = vec_sub(b1.velocity, b2.velocity)
    vr_sq = vec_len_sq(vr)
    ke1 = 0.5 * vr_sq * b2.mass
    ke2 = 0.5 * vr_sq * b1.mass
    ab1 = settings.ke_threshold * b1.mass
    ab2 = settings.ke_threshold * b2.mass

    m_total = b1.mass + b2.mass
    momentum = vec_add(b1.momentum, b2.momentum)
    v_cm = vec_scale(momentum, 1.0 / m_total)

    fraction = spread_fraction(b1.velocity, b2.velocity)
    shatters: List[_Shatter] = []
    for body, other, ke, ab in ((b1, b2, ke1, ab1), (b2, b1, ke2, ab2)):
        if ke <= ab:
            continue
        count = fragment_count(fraction, body.mass, settings)
        if count < 2:
            continue
        # Fragments fly away from the partner; fall back to the relative velocity
        # when the centers coincide.
        direction = vec_norm(vec_sub(body.position, other.position))
        if direction == (0.0, 0.0):
            direction = vec_norm(vec_sub(body.velocity, other.velocity))
        shatters.append(_Shatter(
            body=body,
            count=count,
            spread=fraction * settings.max_spread,
            speed=math.sqrt(2.0 * (ke - ab) / body.mass),
            direction=direction,
        ))

    if not shatters:
        survivor = _merge_pair(b1, b2, m_total, v_cm)
        gone = b2 if survivor is b1 else b1
        return "merge", [], [gone.id]

    products: List[Body] = []
    created: List[Body] = []
    removed: List[int] = []
    fan_momentum = (0.0, 0.0)
    shattering = {s.body.id for s in shatters}
    for body in (b1, b2):
        if body.id not in shattering:
            body.velocity = v_cm
            products.append(body)
    for s in shatters:
        pieces = _fragment_body(s, v_cm, settings)
        for piece in pieces:
            fan_momentum = vec_add(fan_momentum, vec_scale(vec_sub(piece.velocity, v_cm), piece.mass))
        created.extend(pieces)
        products.extend(pieces)
        removed.append(s.body.id)

    # Net fan momentum comes back out of every product equally.
    correction = vec_scale(fan_momentum, 1.0 / m_total)
    for p in products:
        p.velocity = vec_sub(p.velocity, correction)

    return "fragment", created, removed


def _merge_pair(b1: Body, b2: Body, m_total: float, v_cm: Vec2) -> Body:
    # The heavier body survives (the first one on ties).
    bi, bj = (b2, b1) if b2.mass > b1.mass else (b1, b2)

    new_pos = ((bi.position[0] * bi.mass + bj.position[0] * bj.mass) / m_total,
               (bi.position[1] * bi.mass + bj.position[1] * bj.mass) / m_total)
    bi.mass = m_total
    bi.position = new_pos
    bi.velocity = v_cm
    return bi


def _fragment_body(s: _Shatter, v_cm: Vec2, settings: CollisionSettings) -> List[Body]:
    parent = s.body
    piece_mass = parent.mass / s.count
    piece_radius = radius_for_mass(piece_mass, settings.radius_coefficient)
    forward = vec_add(parent.position, vec_scale(s.direction, parent.radius))
    lateral = vec_perp(s.direction)
    # Spaced so neighbouring fragments start just clear of each other.
    gap = 2.0 * piece_radius * 1.01

    pieces = []
    for i, d in enumerate(fan_directions(s.direction, s.count, s.spread)):
        offset = (i - (s.count - 1) / 2.0) * gap
        piece = Body(
            mass=piece_mass,
            position=vec_add(forward, vec_scale(lateral, offset)),
            velocity=vec_add(v_cm, vec_scale(d, s.speed)),
            color=parent.color,
        )
        piece.radius = piece_radius
        pieces.append(piece)
    return pieces


def handle_collisions(store: BodyStore, settings: CollisionSettings) -> List[CollisionEvent]:
    """
    Detect and resolve collisions between bodies.

    Returns one CollisionEvent per resolved pair.
    """
    if not settings.enable or len(store) < 2:
        return []

    pending = []
    involved: Set[int] = set()
    to_remove: Set[int] = set()
    to_add: List[Body] = []

    for bi, bj in store.pairs():
        if bi.id in involved or bj.id in involved:
            continue
        dx = bj.position[0] - bi.position[0]
        dy = bj.position[1] - bi.position[1]
        r_sum = bi.radius + bj.radius
        if dx * dx + dy * dy > r_sum * r_sum:
            continue

        result = resolve_pair(bi, bj, settings)
        if result is None:
            logger.debug("Skipping collision #%d x #%d: identical velocities", bi.id, bj.id)
            continue
        kind, new_bodies, removed = result
        involved.update((bi.id, bj.id))
        to_remove.update(removed)
        to_add.extend(new_bodies)
        pending.append((kind, (bi.id, bj.id), new_bodies, tuple(removed)))

    store.remove_many(to_remove)
    added = store.extend(to_add)

    resolved = []
    for kind, ids, new_bodies, removed in pending:
        event = CollisionEvent(kind, ids, tuple(b.id for b in new_bodies), removed)
        logger.info(event.describe())
        resolved.append(event)
    if added:
        logger.debug("Collisions added %d fragment(s); %d bodies live", len(added), len(store))
    return resolved
