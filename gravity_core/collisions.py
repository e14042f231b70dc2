#!/usr/bin/env python3
"""
Collision handling for the Gravity Simulator.

Bodies are spheres. For every ordered pair (A, B) of distinct active bodies, A
overlaps B when r_A + r_B > |pos_A - pos_B| (touching is not a collision). Each
overlap multiplies A's velocity by the damping factor (-0.2 by default: reverse
and keep 20% of the speed). Several overlaps in one tick compound, in body-set
order.

This response is an approximation. It does not conserve momentum or energy and is
not symmetric between the two bodies; the simulator keeps it as its collision
model. Bodies are never merged or removed.

The module only computes scale factors from a snapshot; the integrator applies them.
"""
from typing import List, Sequence

from .constants import COLLISION_DAMPING
from .data_models import Body
from .vector_utils import vec_dist


class CollisionSettings:
    """Container for collision-related settings."""
    def __init__(self, enable: bool = True, damping: float = COLLISION_DAMPING):
        self.enable = bool(enable)
        self.damping = float(damping)


def overlap_factor(body: Body, other: Body, damping: float = COLLISION_DAMPING) -> float:
    """Velocity scale for `body` caused by `other`: `damping` on overlap, else 1.0."""
    distance = vec_dist(body.position, other.position)
    if body.radius + other.radius > distance:
        return damping
    return 1.0


def collision_scales(bodies: Sequence[Body], settings: CollisionSettings) -> List[float]:
    """
    Per-body velocity scale for this tick, same order as `bodies`.

    Forming bodies, and every body when collisions are disabled, get 1.0.
    """
    scales = [1.0] * len(bodies)
    if not settings.enable or len(bodies) < 2:
        return scales

    for i, bi in enumerate(bodies):
        if not bi.is_active:
            continue
        for j, bj in enumerate(bodies):
            if i == j or not bj.is_active:
                continue
            scales[i] *= overlap_factor(bi, bj, settings.damping)
    return scales
