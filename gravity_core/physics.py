#!/usr/bin/env python3
"""
Core Physics Engine for the Gravity Simulator

Responsibilities
- Compute pairwise Newtonian gravitational accelerations for the active bodies.
- Advance body states with a semi-implicit (symplectic) Euler step, one step per frame.
- Provide energy diagnostics.

Units and conventions
- World positions are in scaled units; distances are converted to metres with
  UNIT_TO_METERS before they enter the force law.
- Masses are in kilograms; G is SI (m^3 kg^-1 s^-2).
- The per-frame update divides acceleration by ACCEL_SCALE and velocity by
  POSITION_SCALE (both multiplied by the simulation speed). The step does not depend
  on the frame's wall time; one call is one tick.

Numerical notes
- No softening: a pair at zero distance contributes nothing instead of dividing by zero.
- Complexity: O(N^2) direct summation over unordered pairs. The simulator targets tens
  of bodies, so no tree code.
- Forces are accumulated from a single snapshot of positions before any body moves,
  and each pair adds equal and opposite momentum changes (Newton's third law).
"""

from typing import List, Optional, Sequence

from .constants import ACCEL_SCALE, G, POSITION_SCALE, UNIT_TO_METERS
from .data_models import Body
from .vector_utils import ZERO, Vec3, vec_add, vec_len, vec_scale, vec_sub


class NBodyPhysics:
    """
    N-body gravitational physics engine.

    The gravitational force between two bodies is:
    F = G * m1 * m2 / r^2

    with r measured in metres. Forming bodies are neither sources nor targets.
    """

    def __init__(self, gravitational_constant: float = G,
                 unit_to_meters: float = UNIT_TO_METERS,
                 accel_scale: float = ACCEL_SCALE,
                 position_scale: float = POSITION_SCALE):
        """
        Args:
            gravitational_constant: G in SI units
            unit_to_meters: metres per world unit
            accel_scale: divisor applied to acceleration when updating velocity
            position_scale: divisor applied to velocity when updating position
        """
        self.G = float(gravitational_constant)
        self.unit_to_meters = float(unit_to_meters)
        self.accel_scale = float(accel_scale)
        self.position_scale = float(position_scale)

    def compute_accelerations(self, bodies: Sequence[Body]) -> List[Vec3]:
        """
        Compute gravitational accelerations for all bodies.

        For every unordered pair (A, B) of active bodies:

            d = pos_B - pos_A,  r = |d| * unit_to_meters
            F = G * m_A * m_B / r^2
            a_A += F / m_A along d / |d|
            a_B -= F / m_B along d / |d|

        Args:
            bodies: Bodies in the simulation's iteration order.

        Returns:
            List of (ax, ay, az) in m/s^2, same order as `bodies`. Forming bodies get (0, 0, 0).
        """
        n = len(bodies)
        accelerations = [ZERO] * n
        positions = [b.position for b in bodies]

        for i in range(n):
            bi = bodies[i]
            if not bi.is_active:
                continue
            for j in range(i + 1, n):
                bj = bodies[j]
                if not bj.is_active:
                    continue

                d = vec_sub(positions[j], positions[i])
                dist = vec_len(d)
                if dist == 0:
                    continue  # coincident bodies, no defined direction

                direction = vec_scale(d, 1.0 / dist)
                r = dist * self.unit_to_meters
                force = self.G * bi.mass * bj.mass / (r * r)

                accelerations[i] = vec_add(accelerations[i], vec_scale(direction, force / bi.mass))
                accelerations[j] = vec_add(accelerations[j], vec_scale(direction, -force / bj.mass))

        return accelerations

    def integrate_body(self, body: Body, acceleration: Vec3, speed: float,
                       velocity_scale: float = 1.0, paused: bool = False) -> None:
        """
        Advance one body by one tick (semi-implicit Euler).

            v = (v + a * speed / accel_scale) * velocity_scale
            x = x + v * speed / position_scale

        `velocity_scale` is the collision response factor for this tick. Nothing moves
        when paused. The radius is recomputed from mass and density either way.
        """
        if not paused:
            v = vec_add(body.velocity, vec_scale(acceleration, speed / self.accel_scale))
            if velocity_scale != 1.0:
                v = vec_scale(v, velocity_scale)
            body.velocity = v
            body.position = vec_add(body.position, vec_scale(v, speed / self.position_scale))
        body.refresh_radius()

    def step(self, bodies: Sequence[Body], speed: float,
             velocity_scales: Optional[Sequence[float]] = None,
             paused: bool = False) -> List[Vec3]:
        """
        Compute accelerations from the current snapshot, then integrate every body.

        Returns the accelerations that were computed (also when paused, in which case
        they are not applied).
        """
        accelerations = self.compute_accelerations(bodies)
        for idx, body in enumerate(bodies):
            scale = velocity_scales[idx] if velocity_scales is not None else 1.0
            self.integrate_body(body, accelerations[idx], speed, scale, paused)
        return accelerations

    # -----------------------
    # Diagnostics
    # -----------------------

    def kinetic_energy(self, bodies: Sequence[Body]) -> float:
        """Total kinetic energy in joules of the active bodies (velocities read as km/s)."""
        total = 0.0
        for b in bodies:
            if not b.is_active:
                continue
            v = vec_len(b.velocity) * self.unit_to_meters
            total += 0.5 * b.mass * v * v
        return total

    def potential_energy(self, bodies: Sequence[Body]) -> float:
        """Total gravitational potential energy in joules over unordered active pairs."""
        active = [b for b in bodies if b.is_active]
        total = 0.0
        for i in range(len(active)):
            for j in range(i + 1, len(active)):
                dist = vec_len(vec_sub(active[j].position, active[i].position))
                if dist == 0:
                    continue
                total -= self.G * active[i].mass * active[j].mass / (dist * self.unit_to_meters)
        return total

    def total_energy(self, bodies: Sequence[Body]) -> float:
        return self.kinetic_energy(bodies) + self.potential_energy(bodies)
