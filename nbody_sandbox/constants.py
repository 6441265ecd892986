#!/usr/bin/env python3
"""
Shared constants for the gravity sandbox.

Units are screen pixels and seconds; masses are dimensionless. These are the
defaults that SimulationSettings starts from, so tuning a value here changes
every fresh simulation.
"""
import math

# Physics
GRAVITATIONAL = 0.01  # velocity impulse coefficient, scaled by dt and the other mass
RADIUS_COEFFICIENT = 1000.0  # bigger number = smaller bodies; radius grows with sqrt(mass)
PI = math.pi
MIN_SEPARATION_SQ = 1e-9  # gravity skips pairs closer than this (squared distance)

# Boundary containment
BOUNDARY_MARGIN = 1.0  # positions are clamped to [margin, size - margin]
BOUNDARY_STRENGTH = 1000.0  # push = strength / distance_to_edge^3

# Collisions
KE_THRESHOLD = 10.0  # kinetic energy absorbable per unit of mass before shattering
MIN_FRAGMENTS = 2
MAX_FRAGMENTS = 6
MIN_FRAGMENT_MASS = 500.0
MAX_SPREAD_DEG = 90.0  # fan width for a head-on hit

# Spawning
DEFAULT_PLANET_MASS = 10000.0
SPAWN_VELOCITY_COEFFICIENT = 5.0
SPAWN_LOG_BASE = 2.2
SPAWN_MIN_DRAG = 1e-6

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
TARGET_FPS = 60
BACKGROUND_COLOR = (245, 245, 245)
BODY_COLOR = (160, 32, 240)
BODY_OUTLINE_COLOR = (40, 0, 60)
DRAG_LINE_COLOR = (0, 0, 0)
DRAG_LINE_WIDTH = 10
HUD_TEXT_COLOR = (60, 60, 60)
MIN_DRAW_RADIUS = 1
