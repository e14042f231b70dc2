import pytest

from gravity_core.camera import Camera3D


def test_point_ahead_projects_to_centre():
    cam = Camera3D(position=(0.0, 1000.0, 5000.0))
    sx, sy, depth = cam.project((0.0, 1000.0, 0.0))
    assert sx == pytest.approx(550.0)
    assert sy == pytest.approx(400.0)
    assert depth == pytest.approx(5000.0)


def test_screen_axes():
    cam = Camera3D(position=(0.0, 0.0, 100.0))
    right = cam.project((10.0, 0.0, 0.0))
    above = cam.project((0.0, 10.0, 0.0))
    assert right[0] > 550.0
    assert above[1] < 400.0


def test_points_behind_or_beyond_far_plane_are_culled():
    cam = Camera3D(position=(0.0, 0.0, 0.0))
    assert cam.project((0.0, 0.0, 10.0)) is None
    assert cam.project((0.0, 0.0, -1e6)) is None


def test_pitch_is_clamped():
    cam = Camera3D()
    cam.look(0.0, -100000.0)
    assert cam.pitch == 89.0
    cam.look(0.0, 100000.0)
    assert cam.pitch == -89.0


def test_move_along_view():
    cam = Camera3D(position=(0.0, 0.0, 0.0))
    cam.move(forward=10.0, right=5.0, up=2.0)
    assert cam.position == pytest.approx((5.0, 2.0, -10.0))


def test_projected_radius_shrinks_with_depth():
    cam = Camera3D()
    assert cam.projected_radius(10.0, 100.0) > cam.projected_radius(10.0, 1000.0)
    assert cam.projected_radius(10.0, 0.0) == 0.0
