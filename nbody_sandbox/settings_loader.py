#!/usr/bin/env python3
"""
Simulation settings and their optional JSON overrides.

Schema
======
settings.json (next to gravity_sandbox.py), every key optional:
{
  "gravitational": 0.01,
  "radius_coefficient": 1000.0,
  "ke_threshold": 10.0,
  "boundary_strength": 1000.0,
  "spawn_mass": 10000.0,
  "spawn_velocity_coefficient": 5.0,
  "spawn_log_base": 2.2,
  "min_fragments": 2,
  "max_fragments": 6,
  "min_fragment_mass": 500.0,
  "max_spread_deg": 90.0,
  "collisions_enabled": true
}

Unknown keys and unusable values are logged and ignored; the defaults from
constants.py stay in place.
"""
import json
import logging
import math
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from . import constants

logger = logging.getLogger("nbody_sandbox")

SETTINGS_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "settings.json")

# Keys that must stay strictly positive; a zero or negative value would divide by zero
# or invert a force somewhere in the step.
_POSITIVE = {
    "gravitational",
    "radius_coefficient",
    "ke_threshold",
    "boundary_strength",
    "spawn_mass",
    "spawn_min_drag",
    "min_fragment_mass",
    "min_separation_sq",
}


@dataclass
class SimulationSettings:
    """Tunable physics parameters shared by every component of the step."""
    gravitational: float = constants.GRAVITATIONAL
    radius_coefficient: float = constants.RADIUS_COEFFICIENT
    min_separation_sq: float = constants.MIN_SEPARATION_SQ
    boundary_strength: float = constants.BOUNDARY_STRENGTH
    ke_threshold: float = constants.KE_THRESHOLD
    min_fragments: int = constants.MIN_FRAGMENTS
    max_fragments: int = constants.MAX_FRAGMENTS
    min_fragment_mass: float = constants.MIN_FRAGMENT_MASS
    max_spread_deg: float = constants.MAX_SPREAD_DEG
    spawn_mass: float = constants.DEFAULT_PLANET_MASS
    spawn_velocity_coefficient: float = constants.SPAWN_VELOCITY_COEFFICIENT
    spawn_log_base: float = constants.SPAWN_LOG_BASE
    spawn_min_drag: float = constants.SPAWN_MIN_DRAG
    collisions_enabled: bool = True

    def update(self, values: Dict[str, Any]) -> None:
        """
        Apply overrides in place, coercing each value to the field's type.

        Rejected entries are logged and skipped so one bad key does not throw
        away the rest of the file.
        """
        known = {f.name: f for f in fields(self)}
        for key, raw in values.items():
            f = known.get(key)
            if f is None:
                logger.warning("Ignoring unknown setting %r", key)
                continue
            value = _coerce(raw, getattr(self, key))
            if value is None:
                logger.warning("Ignoring setting %s=%r: wrong type", key, raw)
                continue
            if not math.isfinite(value):
                logger.warning("Ignoring setting %s=%r: must be finite", key, raw)
                continue
            if key in _POSITIVE and value <= 0:
                logger.warning("Ignoring setting %s=%r: must be positive", key, raw)
                continue
            if key == "spawn_log_base" and value <= 1.0:
                logger.warning("Ignoring setting %s=%r: log base must exceed 1", key, raw)
                continue
            setattr(self, key, value)
        if self.min_fragments < 2:
            self.min_fragments = 2
        if self.max_fragments < self.min_fragments:
            self.max_fragments = self.min_fragments


def _coerce(raw: Any, current: Any) -> Optional[Any]:
    if isinstance(current, bool):
        return raw if isinstance(raw, bool) else None
    if isinstance(raw, bool):
        return None
    try:
        if isinstance(current, int):
            return int(raw)
        return float(raw)
    except (TypeError, ValueError, OverflowError):
        return None


def _read_json(path: str) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read settings from %s: %s", path, exc)
        return None


def load_settings(path: Optional[str] = None) -> SimulationSettings:
    """
    Build SimulationSettings from the defaults plus an optional JSON file.

    A missing file is not an error; the defaults are returned as-is.
    """
    settings = SimulationSettings()
    path = path or SETTINGS_PATH
    if not os.path.isfile(path):
        return settings
    data = _read_json(path)
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Settings file %s must hold a JSON object", path)
        return settings
    settings.update(data)
    logger.info("Loaded settings from %s", path)
    return settings
