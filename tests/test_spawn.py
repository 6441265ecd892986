import math

import pytest

from nbody_sandbox.constants import DEFAULT_PLANET_MASS, SPAWN_LOG_BASE, SPAWN_VELOCITY_COEFFICIENT
from nbody_sandbox.physics import radius_for_mass
from nbody_sandbox.spawn import SpawnController, launch_velocity


def test_zero_length_drag_spawns_at_rest():
    spawner = SpawnController()
    assert spawner.press((100.0, 100.0))
    body = spawner.release((100.0, 100.0))
    assert body.position == (100.0, 100.0)
    assert body.velocity == (0.0, 0.0)
    assert body.mass == DEFAULT_PLANET_MASS
    assert body.radius == radius_for_mass(DEFAULT_PLANET_MASS)


def test_drag_launches_opposite_the_drag():
    spawner = SpawnController()
    spawner.press((0.0, 0.0))
    body = spawner.release((100.0, 0.0))
    expected = math.log(100.0, SPAWN_LOG_BASE) * SPAWN_VELOCITY_COEFFICIENT
    assert body.position == (0.0, 0.0)
    assert body.velocity[0] == pytest.approx(-expected)
    assert body.velocity[1] == pytest.approx(0.0)


def test_launch_speed_grows_sublinearly():
    short = math.hypot(*launch_velocity((0.0, 0.0), (10.0, 0.0)))
    long = math.hypot(*launch_velocity((0.0, 0.0), (1000.0, 0.0)))
    assert 0 < short < long < 100 * short


def test_tiny_drag_gives_no_velocity():
    assert launch_velocity((0.0, 0.0), (0.5, 0.0)) == (0.0, 0.0)


def test_second_press_is_ignored_while_dragging():
    spawner = SpawnController()
    assert spawner.press((10.0, 10.0))
    assert not spawner.press((50.0, 50.0))
    assert spawner.gesture.anchor == (10.0, 10.0)

    body = spawner.release((10.0, 10.0))
    assert body.position == (10.0, 10.0)
    assert spawner.release((10.0, 10.0)) is None
    assert not spawner.dragging


def test_preview_follows_cursor_and_hides_on_release():
    spawner = SpawnController()
    assert not spawner.preview.visible

    spawner.update((10.0, 20.0), pressed=True, released=False)
    spawner.update((40.0, 60.0), pressed=False, released=False)
    assert spawner.preview.visible
    assert spawner.preview.start == (10.0, 20.0)
    assert spawner.preview.end == (40.0, 60.0)

    body = spawner.update((40.0, 60.0), pressed=False, released=True)
    assert body is not None
    assert not spawner.preview.visible


def test_missing_pointer_keeps_gesture_pending():
    spawner = SpawnController()
    spawner.update((10.0, 20.0), pressed=True, released=False)
    assert spawner.update(None, pressed=False, released=True) is None
    assert spawner.dragging
    assert spawner.preview.visible


def test_press_and_release_in_one_update():
    spawner = SpawnController()
    body = spawner.update((5.0, 5.0), pressed=True, released=True)
    assert body.velocity == (0.0, 0.0)
    assert not spawner.dragging


def test_release_without_press_does_nothing():
    spawner = SpawnController()
    assert spawner.update((5.0, 5.0), pressed=False, released=True) is None


def test_spawn_uses_configured_mass_and_radius_coefficient():
    spawner = SpawnController(mass=2500.0)
    spawner.press((1.0, 1.0))
    body = spawner.release((1.0, 1.0), radius_coefficient=10.0)
    assert body.mass == 2500.0
    assert body.radius == radius_for_mass(2500.0, 10.0)
