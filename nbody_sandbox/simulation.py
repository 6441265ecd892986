#!/usr/bin/env python3
"""
The simulation step.

Simulation owns the BodyStore and runs one fixed pipeline per frame:

    spawn -> gravity -> collisions -> radii -> boundary -> integrate

Radii are recomputed after collisions change masses and before the next
frame's collision test. Every input the step needs arrives in a StepInput;
nothing is read from globals, so the step can be driven from any loop (or a
test) with made-up input.
"""
import logging
from typing import Iterable, List, Optional

from .body_store import BodyStore
from .boundary import BoundaryContainment
from .collisions import CollisionSettings, handle_collisions
from .data_models import Body, StepInput, StepOutput
from .physics import GravitySolver, apply_velocity, maintain_radii, radius_for_mass
from .settings_loader import SimulationSettings
from .spawn import SpawnController

logger = logging.getLogger("nbody_sandbox")


class Simulation:
    def __init__(self, settings: Optional[SimulationSettings] = None):
        self.settings = settings or SimulationSettings()
        self.store = BodyStore()
        self.gravity = GravitySolver()
        self.boundary = BoundaryContainment()
        self.spawner = SpawnController()
        self.collisions = CollisionSettings()
        self.apply_settings()

    def apply_settings(self, settings: Optional[SimulationSettings] = None) -> None:
        """Push the (possibly edited) settings into every component."""
        if settings is not None:
            self.settings = settings
        s = self.settings
        self.gravity.set_gravitational(s.gravitational)
        self.gravity.min_separation_sq = s.min_separation_sq
        self.boundary.strength = s.boundary_strength
        self.spawner.mass = s.spawn_mass
        self.spawner.log_base = s.spawn_log_base
        self.spawner.velocity_coefficient = s.spawn_velocity_coefficient
        self.spawner.min_drag = s.spawn_min_drag
        self.collisions = CollisionSettings(
            enable=s.collisions_enabled,
            ke_threshold=s.ke_threshold,
            min_fragments=s.min_fragments,
            max_fragments=s.max_fragments,
            min_fragment_mass=s.min_fragment_mass,
            max_spread_deg=s.max_spread_deg,
            radius_coefficient=s.radius_coefficient,
        )

    def add_body(self, body: Body) -> Body:
        body.radius = radius_for_mass(body.mass, self.settings.radius_coefficient)
        return self.store.add(body)

    def add_bodies(self, bodies: Iterable[Body]) -> List[Body]:
        return [self.add_body(b) for b in bodies]

    def clear(self) -> None:
        self.store.clear()
        self.spawner.cancel()

    def step(self, dt: float, inp: Optional[StepInput] = None) -> StepOutput:
        """Advance the world by dt seconds and return what the renderer needs."""
        inp = inp or StepInput()
        dt = max(0.0, float(dt))

        self._spawn(inp)
        self.gravity.apply(self.store, dt)
        events = handle_collisions(self.store, self.collisions)
        maintain_radii(self.store, self.settings.radius_coefficient)
        self.boundary.apply(self.store, inp.viewport)
        apply_velocity(self.store, dt)

        return StepOutput(bodies=self.store.snapshot(), preview=self.spawner.preview, events=events)

    def idle(self, inp: Optional[StepInput] = None) -> StepOutput:
        """Handle spawn input only; the world does not move (used while paused)."""
        self._spawn(inp or StepInput())
        return StepOutput(bodies=self.store.snapshot(), preview=self.spawner.preview)

    def _spawn(self, inp: StepInput) -> Optional[Body]:
        spawned = self.spawner.update(inp.pointer, inp.spawn_pressed, inp.spawn_released,
                                      self.settings.radius_coefficient)
        if spawned is None:
            return None
        self.store.add(spawned)
        logger.info("Spawned body #%d at (%.1f, %.1f) with velocity (%.2f, %.2f)",
                    spawned.id, spawned.position[0], spawned.position[1],
                    spawned.velocity[0], spawned.velocity[1])
        return spawned
