#!/usr/bin/env python3
"""
Fly camera for projecting world coordinates onto the viewport.

Yaw/pitch mouse look, movement along the view basis, and a pinhole perspective
projection to pixel coordinates. Pure math; the renderer feeds it input.
"""
import math
from typing import Optional, Tuple

from .constants import (
    CAMERA_START,
    FAR_PLANE,
    FIELD_OF_VIEW_DEG,
    MAX_PITCH_DEG,
    MOUSE_SENSITIVITY,
    NEAR_PLANE,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import Vec3, clamp, vec_add, vec_cross, vec_dot, vec_norm, vec_scale, vec_sub

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)


class Camera3D:
    """
    Perspective camera looking along `front` from `position`.

    Yaw -90 with pitch 0 looks down -z, like the default OpenGL view.
    """

    def __init__(self, position: Vec3 = CAMERA_START, yaw: float = -90.0, pitch: float = 0.0,
                 fov_deg: float = FIELD_OF_VIEW_DEG):
        self.position: Vec3 = tuple(position)
        self.yaw = yaw
        self.pitch = pitch
        self.fov_deg = fov_deg
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)
        self.front: Vec3 = self._front_from_angles()

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def _front_from_angles(self) -> Vec3:
        yaw = math.radians(self.yaw)
        pitch = math.radians(self.pitch)
        return vec_norm((
            math.cos(yaw) * math.cos(pitch),
            math.sin(pitch),
            math.sin(yaw) * math.cos(pitch),
        ))

    def look(self, dx_pixels: float, dy_pixels: float, sensitivity: float = MOUSE_SENSITIVITY) -> None:
        """Mouse look; dy is screen-down positive, so moving the mouse up pitches up."""
        self.yaw += dx_pixels * sensitivity
        self.pitch = clamp(self.pitch - dy_pixels * sensitivity, -MAX_PITCH_DEG, MAX_PITCH_DEG)
        self.front = self._front_from_angles()

    def right(self) -> Vec3:
        return vec_norm(vec_cross(self.front, WORLD_UP))

    def up(self) -> Vec3:
        return vec_cross(self.right(), self.front)

    def move(self, forward: float = 0.0, right: float = 0.0, up: float = 0.0) -> None:
        delta = vec_add(vec_scale(self.front, forward), vec_scale(self.right(), right))
        delta = vec_add(delta, vec_scale(WORLD_UP, up))
        self.position = vec_add(self.position, delta)

    def focal_length(self) -> float:
        return (self.viewport_size[1] / 2.0) / math.tan(math.radians(self.fov_deg) / 2.0)

    def project(self, point: Vec3) -> Optional[Tuple[float, float, float]]:
        """
        (screen x, screen y, depth) of a world point, or None outside the near/far range.
        """
        rel = vec_sub(point, self.position)
        depth = vec_dot(rel, self.front)
        if depth <= NEAR_PLANE or depth >= FAR_PLANE:
            return None
        f = self.focal_length() / depth
        w, h = self.viewport_size
        sx = w / 2.0 + vec_dot(rel, self.right()) * f
        sy = h / 2.0 - vec_dot(rel, self.up()) * f
        return (sx, sy, depth)

    def projected_radius(self, radius: float, depth: float) -> float:
        if depth <= 0:
            return 0.0
        return radius * self.focal_length() / depth
