#!/usr/bin/env python3
"""
Click-drag spawning.

The controller is a two-state machine, Idle -> Dragging -> Idle:
- press while Idle records the cursor as the anchor;
- while Dragging the drag preview runs from the anchor to the cursor;
- release creates a body at the anchor, launched away from the release point
  (slingshot), and hides the preview.

Launch speed grows with the logarithm of the drag length, so short drags
barely move a body and long drags saturate:

    speed = max(log_b(max(length, eps)), 0) * S
"""
import logging
import math
from typing import Optional

from .constants import (
    DEFAULT_PLANET_MASS,
    SPAWN_LOG_BASE,
    SPAWN_MIN_DRAG,
    SPAWN_VELOCITY_COEFFICIENT,
)
from .data_models import Body, DragPreview, SpawnGesture
from .physics import radius_for_mass
from .vector_utils import Vec2, ZERO, vec_len, vec_scale, vec_sub

logger = logging.getLogger("nbody_sandbox")


def launch_velocity(anchor: Vec2, release: Vec2,
                    log_base: float = SPAWN_LOG_BASE,
                    scale: float = SPAWN_VELOCITY_COEFFICIENT,
                    min_drag: float = SPAWN_MIN_DRAG) -> Vec2:
    """Velocity for a body dragged from anchor to release."""
    if anchor == release:
        return ZERO
    pull = vec_sub(anchor, release)
    length = vec_len(pull)
    speed = max(math.log(max(length, min_drag), log_base), 0.0) * scale
    if length == 0 or speed == 0:
        return ZERO
    return vec_scale(pull, speed / length)


class SpawnController:
    """Turns right-button drags into new bodies; at most one gesture at a time."""

    def __init__(self, mass: float = DEFAULT_PLANET_MASS,
                 log_base: float = SPAWN_LOG_BASE,
                 velocity_coefficient: float = SPAWN_VELOCITY_COEFFICIENT,
                 min_drag: float = SPAWN_MIN_DRAG):
        self.mass = float(mass)
        self.log_base = float(log_base)
        self.velocity_coefficient = float(velocity_coefficient)
        self.min_drag = float(min_drag)
        self.gesture: Optional[SpawnGesture] = None
        self.preview = DragPreview()

    @property
    def dragging(self) -> bool:
        return self.gesture is not None

    def press(self, cursor: Vec2) -> bool:
        """Start a gesture; ignored (returns False) while one is pending."""
        if self.gesture is not None:
            return False
        self.gesture = SpawnGesture(anchor=cursor)
        self.preview = DragPreview(cursor, cursor, True)
        return True

    def track(self, cursor: Vec2) -> None:
        if self.gesture is not None:
            self.preview = DragPreview(self.gesture.anchor, cursor, True)

    def release(self, cursor: Vec2, radius_coefficient: Optional[float] = None) -> Optional[Body]:
        """Finish the gesture and return the new body, or None when Idle."""
        gesture = self.gesture
        if gesture is None:
            return None
        self.gesture = None
        self.preview = DragPreview(gesture.anchor, cursor, False)
        velocity = launch_velocity(gesture.anchor, cursor, self.log_base,
                                   self.velocity_coefficient, self.min_drag)
        body = Body(mass=self.mass, position=gesture.anchor, velocity=velocity)
        if radius_coefficient is None:
            body.radius = radius_for_mass(body.mass)
        else:
            body.radius = radius_for_mass(body.mass, radius_coefficient)
        return body

    def cancel(self) -> None:
        self.gesture = None
        self.preview = DragPreview()

    def update(self, pointer: Optional[Vec2], pressed: bool, released: bool,
               radius_coefficient: Optional[float] = None) -> Optional[Body]:
        """
        Feed one step's worth of input.

        Does nothing without a pointer: a pending gesture stays pending and the
        preview keeps its last endpoints.
        """
        if pointer is None:
            return None
        if pressed and self.press(pointer):
            logger.debug("Spawn gesture started at (%.1f, %.1f)", pointer[0], pointer[1])
        if released:
            return self.release(pointer, radius_coefficient)
        self.track(pointer)
        return None
