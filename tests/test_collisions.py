import pytest

from gravity_core.collisions import CollisionSettings, collision_scales, overlap_factor


def test_touching_bodies_do_not_collide(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    b = make_body(2, (0.0, 0.0, 0.0))
    b.position = (a.radius + b.radius, 0.0, 0.0)
    assert overlap_factor(a, b) == 1.0
    assert overlap_factor(b, a) == 1.0
    assert collision_scales([a, b], CollisionSettings()) == [1.0, 1.0]


def test_overlap_damps_both_bodies(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    b = make_body(2, (0.0, 0.0, 0.0))
    b.position = (0.5 * (a.radius + b.radius), 0.0, 0.0)
    assert overlap_factor(a, b) == -0.2
    assert collision_scales([a, b], CollisionSettings()) == [-0.2, -0.2]


def test_separated_bodies(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    b = make_body(2, (1000.0, 0.0, 0.0))
    assert collision_scales([a, b], CollisionSettings()) == [1.0, 1.0]


def test_multiple_overlaps_compound(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    b = make_body(2, (1.0, 0.0, 0.0))
    c = make_body(3, (-1.0, 0.0, 0.0))
    far = make_body(4, (5000.0, 0.0, 0.0))
    scales = collision_scales([a, b, c, far], CollisionSettings())
    assert scales[0] == pytest.approx(0.04)
    assert scales[3] == 1.0


def test_forming_bodies_are_ignored(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    forming = make_body(2, (0.0, 0.0, 0.0), active=False)
    assert collision_scales([a, forming], CollisionSettings()) == [1.0, 1.0]


def test_disabled_and_custom_damping(make_body):
    a = make_body(1, (0.0, 0.0, 0.0))
    b = make_body(2, (1.0, 0.0, 0.0))
    assert collision_scales([a, b], CollisionSettings(enable=False)) == [1.0, 1.0]
    assert collision_scales([a, b], CollisionSettings(damping=0.5)) == [0.5, 0.5]
