#!/usr/bin/env python3
"""
Data models for the gravity sandbox.

This module defines the Body record owned by the BodyStore, plus the plain
snapshots that cross the step boundary: StepInput going in, StepOutput
(BodyView, DragPreview, CollisionEvent) coming out.

Units and usage
- position is in pixels, velocity in pixels per second, radius in pixels.
- radius is derived from mass by the radius-mass coupler; nothing else sets it.
- Body instances belong to the simulation step; the renderer and the UI only
  ever see BodyView copies.
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import BODY_COLOR
from .vector_utils import Vec2, ZERO, vec_is_finite


@dataclass
class Body:
    """
    A simulated circular mass point.

    Fields:
    - id: Identifier assigned by the BodyStore (-1 until stored)
    - mass: Strictly positive mass
    - position: 2D position (x, y) in pixels
    - velocity: 2D velocity (vx, vy) in pixels/second
    - radius: Derived from mass every step
    - color: RGB tuple used for rendering

    Raises ValueError when built with a non-positive mass or non-finite
    position/velocity.
    """
    mass: float
    position: Vec2
    velocity: Vec2 = ZERO
    radius: float = 0.0
    color: Tuple[int, int, int] = BODY_COLOR
    id: int = -1

    def __post_init__(self) -> None:
        self.mass = float(self.mass)
        if not math.isfinite(self.mass) or self.mass <= 0.0:
            raise ValueError(f"Body mass must be positive and finite, got {self.mass!r}")
        self.position = (float(self.position[0]), float(self.position[1]))
        self.velocity = (float(self.velocity[0]), float(self.velocity[1]))
        if not vec_is_finite(self.position):
            raise ValueError(f"Body position must be finite, got {self.position!r}")
        if not vec_is_finite(self.velocity):
            raise ValueError(f"Body velocity must be finite, got {self.velocity!r}")

    @property
    def momentum(self) -> Vec2:
        return (self.velocity[0] * self.mass, self.velocity[1] * self.mass)

    def view(self) -> "BodyView":
        return BodyView(self.id, self.position, self.velocity, self.mass, self.radius, self.color)


@dataclass(frozen=True)
class BodyView:
    """Read-only copy of a Body handed to presentation collaborators."""
    id: int
    position: Vec2
    velocity: Vec2
    mass: float
    radius: float
    color: Tuple[int, int, int]


@dataclass
class SpawnGesture:
    """In-progress right-drag; anchor is where the button went down."""
    anchor: Vec2


@dataclass(frozen=True)
class DragPreview:
    start: Vec2 = ZERO
    end: Vec2 = ZERO
    visible: bool = False


@dataclass(frozen=True)
class StepInput:
    """
    Everything the step needs from the windowing collaborator.

    viewport and pointer are None when unavailable; the affected components
    then do nothing for that step.
    """
    viewport: Optional[Tuple[float, float]] = None
    pointer: Optional[Vec2] = None
    spawn_pressed: bool = False
    spawn_released: bool = False


@dataclass(frozen=True)
class CollisionEvent:
    kind: str  # "merge" | "fragment"
    body_ids: Tuple[int, int]
    created_ids: Tuple[int, ...] = ()
    removed_ids: Tuple[int, ...] = ()

    def describe(self) -> str:
        a, b = self.body_ids
        if self.kind == "merge":
            return f"Merged #{a} + #{b}"
        return f"Fragmented #{a} x #{b} into {len(self.created_ids)} pieces"


@dataclass
class StepOutput:
    bodies: List[BodyView] = field(default_factory=list)
    preview: DragPreview = field(default_factory=DragPreview)
    events: List[CollisionEvent] = field(default_factory=list)
