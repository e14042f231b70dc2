#!/usr/bin/env python3
"""
Simulation context: owns the bodies and global settings and runs one tick at a time.

What a tick does
1) Accelerations for every body from one snapshot of positions (NBodyPhysics).
2) Collision velocity scales from the same snapshot (collisions.collision_scales).
3) Integration of every body with its acceleration and scale; skipped when paused.
4) Trail sampling for active bodies that carry a trail (not while paused).

Bodies are addressed by integer handles and kept in insertion order, which is the
iteration order of every stage. Renderers get copies through snapshot_bodies() and
sample_curvature(); they never hold references to live bodies.

Threading
- Every public method takes `lock` (re-entrant), so commands from a UI thread are
  serialized with ticks running on a render thread.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .collisions import CollisionSettings, collision_scales
from .constants import (
    ACCEL_SCALE,
    DEFAULT_DENSITY,
    G,
    POSITION_SCALE,
    TRAIL_CAPACITY,
    TRAIL_SAMPLE_INTERVAL,
    UNIT_TO_METERS,
)
from .curvature import CurvatureField, CurvatureTransform, displaced_grid, grid_points
from .data_models import Body, BodySnapshot, Color
from .errors import InvalidParameter, UnknownBody
from .physics import NBodyPhysics
from .trails import TrailBuffer
from .vector_utils import Vec3

logger = logging.getLogger(__name__)


@dataclass
class SimulationSettings:
    gravitational_constant: float = G
    simulation_speed: float = 1.0
    trail_sample_interval: int = TRAIL_SAMPLE_INTERVAL
    trail_capacity: int = TRAIL_CAPACITY
    accel_scale: float = ACCEL_SCALE
    position_scale: float = POSITION_SCALE
    unit_to_meters: float = UNIT_TO_METERS
    collisions: CollisionSettings = field(default_factory=CollisionSettings)
    curvature_transform: CurvatureTransform = field(default_factory=CurvatureTransform)

    def validate(self) -> None:
        for name in ("gravitational_constant", "simulation_speed", "accel_scale",
                     "position_scale", "unit_to_meters"):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidParameter(f"{name} must be > 0, got {value!r}")
        for name in ("trail_sample_interval", "trail_capacity"):
            value = getattr(self, name)
            if int(value) < 1:
                raise InvalidParameter(f"{name} must be >= 1, got {value!r}")


@dataclass(frozen=True)
class SimulationStats:
    ticks: int
    simulated_seconds: float
    mean_tick_ms: float
    body_count: int
    active_count: int


class Simulation:
    def __init__(self, settings: Optional[SimulationSettings] = None):
        settings = settings if settings is not None else SimulationSettings()
        settings.validate()
        self.settings = settings
        self.lock = threading.RLock()

        self.physics = NBodyPhysics(
            gravitational_constant=settings.gravitational_constant,
            unit_to_meters=settings.unit_to_meters,
            accel_scale=settings.accel_scale,
            position_scale=settings.position_scale,
        )
        self.collisions = settings.collisions
        self.field = CurvatureField(
            gravitational_constant=settings.gravitational_constant,
            unit_to_meters=settings.unit_to_meters,
            transform=settings.curvature_transform,
        )

        self._bodies: Dict[int, Body] = {}
        self._next_handle = 1
        self._speed = float(settings.simulation_speed)
        self._paused = False

        # Statistics
        self._ticks = 0
        self._simulated_seconds = 0.0
        self._tick_time_total = 0.0

    # -----------------------
    # Global parameters
    # -----------------------

    @property
    def G(self) -> float:
        return self.physics.G

    @property
    def simulation_speed(self) -> float:
        return self._speed

    @property
    def paused(self) -> bool:
        return self._paused

    def set_simulation_speed(self, multiplier: float) -> None:
        if not multiplier > 0:
            raise InvalidParameter(f"simulation speed must be > 0, got {multiplier!r}")
        with self.lock:
            self._speed = float(multiplier)
        logger.info("Simulation speed: %.1fx", self._speed)

    def set_paused(self, paused: bool) -> None:
        with self.lock:
            changed = self._paused != bool(paused)
            self._paused = bool(paused)
        if changed:
            logger.info("Simulation %s", "paused" if paused else "resumed")

    # -----------------------
    # Body lifecycle
    # -----------------------

    def create_body(self, position, velocity, mass: float, density: float = DEFAULT_DENSITY,
                    color: Optional[Color] = None, has_trail: bool = False,
                    name: Optional[str] = None) -> int:
        """Add a FORMING body and return its handle."""
        with self.lock:
            handle = self._next_handle
            trail = None
            if has_trail:
                trail = TrailBuffer(self.settings.trail_capacity, self.settings.trail_sample_interval)
            body = Body(handle, position, velocity, mass, density,
                        color=color, has_trail=has_trail, name=name, trail=trail)
            self._bodies[handle] = body
            self._next_handle += 1
        logger.debug("Created %r (radius %.3f)", body, body.radius)
        return handle

    def grow_body(self, handle: int, mass_multiplier_per_second: float, elapsed_seconds: float) -> float:
        """Compound a FORMING body's mass; returns the new mass."""
        with self.lock:
            return self._get(handle).grow(mass_multiplier_per_second, elapsed_seconds)

    def nudge_body(self, handle: int, delta) -> None:
        with self.lock:
            self._get(handle).nudge(delta)

    def launch_body(self, handle: int) -> None:
        with self.lock:
            body = self._get(handle)
            body.launch()
        logger.info("Launched %s (mass %.3e kg, radius %.2f)", body.name, body.mass, body.radius)

    def remove_body(self, handle: int) -> None:
        with self.lock:
            body = self._get(handle)
            del self._bodies[handle]
        logger.info("Removed %s", body.name)

    def clear(self) -> None:
        with self.lock:
            self._bodies.clear()

    def set_body_color(self, handle: int, color: Color) -> None:
        with self.lock:
            self._get(handle).color = tuple(color)

    def set_density(self, handle: int, density: float) -> None:
        with self.lock:
            self._get(handle).density = density

    # -----------------------
    # Stepping
    # -----------------------

    def tick(self, elapsed_seconds: float) -> None:
        """
        Advance the simulation by one step.

        `elapsed_seconds` is the frame's wall time. The physics step itself is per
        frame; elapsed time only feeds the simulated-time statistic.
        """
        if not elapsed_seconds >= 0:
            raise InvalidParameter(f"elapsed seconds must be >= 0, got {elapsed_seconds!r}")
        started = time.perf_counter()
        with self.lock:
            bodies = list(self._bodies.values())
            paused = self._paused
            speed = self._speed

            # both read the pre-integration snapshot
            scales = collision_scales(bodies, self.collisions)
            self.physics.step(bodies, speed, scales, paused)

            if not paused:
                for body in bodies:
                    if body.is_active and body.trail is not None:
                        body.trail.record(body.position)
                self._simulated_seconds += elapsed_seconds * speed
            self._ticks += 1
            self._tick_time_total += time.perf_counter() - started

    # -----------------------
    # Read side
    # -----------------------

    def handles(self) -> List[int]:
        with self.lock:
            return list(self._bodies)

    def get_body(self, handle: int) -> BodySnapshot:
        with self.lock:
            return self._get(handle).snapshot()

    def snapshot_bodies(self) -> List[BodySnapshot]:
        with self.lock:
            return [b.snapshot() for b in self._bodies.values()]

    def sample_curvature(self, points: Iterable, raw: bool = False) -> List[float]:
        """
        Curvature value at each point, one-to-one with `points`.

        All bodies count, forming ones included. With raw=True the output transform
        is skipped.
        """
        with self.lock:
            bodies = list(self._bodies.values())
            if raw:
                return [self.field.displacement(p, bodies) for p in points]
            return self.field.sample_many(points, bodies)

    def curvature_grid(self, size: float, divisions: int) -> List[Vec3]:
        """Line-grid vertices lifted to the current curvature field."""
        points = grid_points(size, divisions)
        return displaced_grid(points, self.sample_curvature(points))

    def kinetic_energy(self) -> float:
        with self.lock:
            return self.physics.kinetic_energy(list(self._bodies.values()))

    def potential_energy(self) -> float:
        with self.lock:
            return self.physics.potential_energy(list(self._bodies.values()))

    def total_energy(self) -> float:
        with self.lock:
            return self.physics.total_energy(list(self._bodies.values()))

    def stats(self) -> SimulationStats:
        with self.lock:
            mean_ms = (self._tick_time_total / self._ticks * 1000.0) if self._ticks else 0.0
            return SimulationStats(
                ticks=self._ticks,
                simulated_seconds=self._simulated_seconds,
                mean_tick_ms=mean_ms,
                body_count=len(self._bodies),
                active_count=sum(1 for b in self._bodies.values() if b.is_active),
            )

    def __len__(self) -> int:
        return len(self._bodies)

    def __contains__(self, handle) -> bool:
        return handle in self._bodies

    def _get(self, handle: int) -> Body:
        try:
            return self._bodies[handle]
        except (KeyError, TypeError):
            raise UnknownBody(handle) from None
