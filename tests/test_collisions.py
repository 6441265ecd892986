import math

import pytest

from nbody_sandbox.body_store import BodyStore
from nbody_sandbox.collisions import (
    CollisionSettings,
    fan_directions,
    fragment_count,
    handle_collisions,
    spread_fraction,
)
from nbody_sandbox.data_models import Body
from nbody_sandbox.physics import maintain_radii


def make_store(*bodies):
    store = BodyStore()
    store.extend(bodies)
    maintain_radii(store)
    return store


def totals(store):
    return store.total_mass(), store.total_momentum()


def test_slow_collision_merges_into_heavier_body():
    light = Body(1000.0, (0.0, 0.0), velocity=(1.0, 0.0))
    heavy = Body(3000.0, (1.0, 0.0), velocity=(0.0, 1.0))
    store = make_store(light, heavy)
    mass_before, momentum_before = totals(store)

    events = handle_collisions(store, CollisionSettings())

    assert len(events) == 1
    assert events[0].kind == "merge"
    assert events[0].removed_ids == (light.id,)
    assert list(store) == [heavy]
    assert heavy.mass == pytest.approx(mass_before)
    assert heavy.velocity == pytest.approx((0.25, 0.75))
    assert heavy.position == pytest.approx((0.75, 0.0))
    mass_after, momentum_after = totals(store)
    assert mass_after == pytest.approx(mass_before)
    assert momentum_after == pytest.approx(momentum_before)


def test_identical_velocities_are_skipped():
    a = Body(1000.0, (0.0, 0.0), velocity=(1.0, 1.0))
    b = Body(1000.0, (0.5, 0.0), velocity=(1.0, 1.0))
    store = make_store(a, b)
    assert handle_collisions(store, CollisionSettings()) == []
    assert len(store) == 2


def test_separated_bodies_do_not_collide():
    a = Body(1000.0, (0.0, 0.0), velocity=(1.0, 0.0))
    b = Body(1000.0, (50.0, 0.0), velocity=(-1.0, 0.0))
    store = make_store(a, b)
    assert handle_collisions(store, CollisionSettings()) == []


def test_disabled_collisions_do_nothing():
    a = Body(1000.0, (0.0, 0.0), velocity=(1.0, 0.0))
    b = Body(1000.0, (0.5, 0.0), velocity=(0.0, 1.0))
    store = make_store(a, b)
    assert handle_collisions(store, CollisionSettings(enable=False)) == []
    assert len(store) == 2


def test_head_on_impact_shatters_both_bodies_widely():
    a = Body(10000.0, (0.0, 0.0), velocity=(100.0, 0.0))
    b = Body(10000.0, (2.0, 0.0), velocity=(-100.0, 0.0))
    store = make_store(a, b)
    mass_before, momentum_before = totals(store)

    events = handle_collisions(store, CollisionSettings())

    assert len(events) == 1
    event = events[0]
    assert event.kind == "fragment"
    assert set(event.removed_ids) == {a.id, b.id}
    assert len(event.created_ids) == 12
    assert len(store) == 12
    assert a.id not in store and b.id not in store
    mass_after, momentum_after = totals(store)
    assert mass_after == pytest.approx(mass_before)
    assert momentum_after[0] == pytest.approx(momentum_before[0], abs=1e-6)
    assert momentum_after[1] == pytest.approx(momentum_before[1], abs=1e-6)


def test_fragments_fly_away_from_partner():
    a = Body(10000.0, (0.0, 0.0), velocity=(100.0, 0.0))
    b = Body(10000.0, (2.0, 0.0), velocity=(-100.0, 0.0))
    store = make_store(a, b)
    handle_collisions(store, CollisionSettings())
    left = [p for p in store if p.position[0] < 1.0]
    right = [p for p in store if p.position[0] > 1.0]
    assert len(left) == len(right) == 6
    assert all(p.velocity[0] < 0 for p in left)
    assert all(p.velocity[0] > 0 for p in right)


def test_glancing_impact_makes_fewer_pieces():
    a = Body(10000.0, (0.0, 0.0), velocity=(100.0, 0.0))
    b = Body(10000.0, (2.0, 0.0), velocity=(50.0, 0.0))
    store = make_store(a, b)
    events = handle_collisions(store, CollisionSettings())
    assert events[0].kind == "fragment"
    assert len(events[0].created_ids) == 4


def test_only_overloaded_body_shatters():
    light = Body(1000.0, (0.0, 0.0), velocity=(10.0, 0.0))
    heavy = Body(100000.0, (5.0, 0.0))
    store = make_store(light, heavy)
    mass_before, momentum_before = totals(store)

    events = handle_collisions(store, CollisionSettings())

    assert events[0].kind == "fragment"
    assert events[0].removed_ids == (light.id,)
    assert heavy.id in store
    assert heavy.mass == 100000.0
    assert len(store) == 3
    pieces = [store.get(i) for i in events[0].created_ids]
    assert all(p.mass == pytest.approx(500.0) for p in pieces)
    mass_after, momentum_after = totals(store)
    assert mass_after == pytest.approx(mass_before)
    assert momentum_after[0] == pytest.approx(momentum_before[0])
    assert momentum_after[1] == pytest.approx(momentum_before[1], abs=1e-9)


def test_too_light_to_split_merges_instead():
    a = Body(600.0, (0.0, 0.0), velocity=(500.0, 0.0))
    b = Body(600.0, (0.5, 0.0), velocity=(-500.0, 0.0))
    store = make_store(a, b)
    events = handle_collisions(store, CollisionSettings())
    assert events[0].kind == "merge"
    assert len(store) == 1
    assert next(iter(store)).velocity == pytest.approx((0.0, 0.0))


def test_each_body_resolves_at_most_once_per_step():
    a = Body(1000.0, (0.0, 0.0), velocity=(1.0, 0.0))
    b = Body(1000.0, (0.5, 0.0), velocity=(0.0, 1.0))
    c = Body(1000.0, (0.0, 0.5), velocity=(-1.0, 0.0))
    store = make_store(a, b, c)

    events = handle_collisions(store, CollisionSettings())
    assert len(events) == 1
    assert events[0].body_ids == (a.id, b.id)
    assert len(store) == 2

    maintain_radii(store)
    events = handle_collisions(store, CollisionSettings())
    assert len(events) == 1
    assert len(store) == 1
    assert next(iter(store)).mass == pytest.approx(3000.0)


def test_spread_fraction_follows_dot_product():
    assert spread_fraction((1.0, 0.0), (5.0, 0.0)) == pytest.approx(0.0)
    assert spread_fraction((1.0, 0.0), (0.0, 3.0)) == pytest.approx(0.5)
    assert spread_fraction((1.0, 0.0), (-2.0, 0.0)) == pytest.approx(1.0)
    assert spread_fraction((0.0, 0.0), (1.0, 0.0)) == pytest.approx(0.5)


def test_fragment_count_grows_with_spread():
    settings = CollisionSettings()
    counts = [fragment_count(f / 10.0, 1e9, settings) for f in range(11)]
    assert counts[0] == settings.min_fragments
    assert counts[-1] == settings.max_fragments
    assert counts == sorted(counts)


def test_fragment_count_limited_by_mass():
    settings = CollisionSettings(min_fragment_mass=500.0)
    assert fragment_count(1.0, 1500.0, settings) == 3
    assert fragment_count(1.0, 999.0, settings) == 1


def test_fan_directions_cover_spread():
    dirs = fan_directions((1.0, 0.0), 3, math.pi / 2)
    angles = [math.atan2(d[1], d[0]) for d in dirs]
    assert angles == pytest.approx([-math.pi / 4, 0.0, math.pi / 4])
    assert all(math.hypot(*d) == pytest.approx(1.0) for d in dirs)
