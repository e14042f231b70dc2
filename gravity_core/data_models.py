#!/usr/bin/env python3
"""
Data models for the Gravity Simulator.

This module defines the Body entity shared between the physics stages and the
Simulation, plus the read-only BodySnapshot handed to renderers.

Units and usage
- position is in world units (km), velocity in world units per simulated second.
- mass is in kg, density in kg/m^3; radius is derived from both and is never set directly.
- trail stores sampled past positions; it exists only for bodies created with has_trail.
- Body instances are only mutated by the Simulation that owns them, under its lock.

Lifecycle
A body starts FORMING: it takes no part in gravity or collisions and its mass may be
grown. launch() promotes it to ACTIVE, which is final.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .constants import DEFAULT_BODY_COLOR, DEFAULT_DENSITY
from .errors import InvalidLifecycleTransition, InvalidParameter
from .mass_radius import body_radius
from .trails import TrailBuffer
from .vector_utils import Vec3, as_vec3, vec_add

Color = Tuple[float, float, float, float]


class LifecycleState(Enum):
    FORMING = "forming"
    ACTIVE = "active"


class Body:
    """
    Represents a celestial body in the simulation.

    Fields:
    - handle: Identifier assigned by the owning Simulation
    - name: Display name
    - position: 3D position (x, y, z) in world units
    - velocity: 3D velocity in world units per simulated second
    - mass: Mass in kilograms (> 0)
    - density: Density in kg/m^3 (> 0)
    - radius: Visual radius in world units, recomputed on every mass/density change
    - color: RGBA tuple in 0..1 used for rendering
    - state: LifecycleState
    - trail: TrailBuffer or None
    """

    def __init__(self, handle: int, position, velocity, mass: float,
                 density: float = DEFAULT_DENSITY, color: Optional[Color] = None,
                 has_trail: bool = False, name: Optional[str] = None,
                 trail: Optional[TrailBuffer] = None):
        self.handle = handle
        self.name = name or f"Body {handle}"
        self.position: Vec3 = as_vec3(position)
        self.velocity: Vec3 = as_vec3(velocity)
        self._mass = float(mass)
        self._density = float(density)
        self._radius = body_radius(self._mass, self._density)
        self.color: Color = tuple(color) if color is not None else DEFAULT_BODY_COLOR
        self.state = LifecycleState.FORMING
        self.has_trail = bool(has_trail)
        if self.has_trail:
            self.trail: Optional[TrailBuffer] = trail if trail is not None else TrailBuffer()
        else:
            self.trail = None

    # -----------------------
    # Mass / density / radius
    # -----------------------

    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float) -> None:
        self._radius = body_radius(value, self._density)
        self._mass = float(value)

    @property
    def density(self) -> float:
        return self._density

    @density.setter
    def density(self, value: float) -> None:
        self._radius = body_radius(self._mass, value)
        self._density = float(value)

    @property
    def radius(self) -> float:
        return self._radius

    def refresh_radius(self) -> float:
        self._radius = body_radius(self._mass, self._density)
        return self._radius

    # -----------------------
    # Lifecycle
    # -----------------------

    @property
    def is_active(self) -> bool:
        return self.state is LifecycleState.ACTIVE

    @property
    def is_forming(self) -> bool:
        return self.state is LifecycleState.FORMING

    def grow(self, multiplier_per_second: float, elapsed_seconds: float) -> float:
        """
        Compound the mass by `multiplier_per_second` over `elapsed_seconds`.

        Only valid while FORMING. The multiplier must be >= 1 so mass never shrinks.
        Returns the new mass.
        """
        if not self.is_forming:
            raise InvalidLifecycleTransition(f"{self.name} is {self.state.value}; only forming bodies can grow")
        if not multiplier_per_second >= 1.0:
            raise InvalidParameter(f"mass multiplier must be >= 1, got {multiplier_per_second!r}")
        if not elapsed_seconds >= 0:
            raise InvalidParameter(f"elapsed seconds must be >= 0, got {elapsed_seconds!r}")
        try:
            grown = self._mass * multiplier_per_second ** elapsed_seconds
        except OverflowError:
            grown = math.inf
        if not math.isfinite(grown):
            raise InvalidParameter(f"growing {self.name} by {multiplier_per_second!r} over {elapsed_seconds!r} s overflows its mass")
        self.mass = grown
        return self._mass

    def nudge(self, delta) -> None:
        """Move a FORMING body by `delta` while it is being placed."""
        if not self.is_forming:
            raise InvalidLifecycleTransition(f"{self.name} is {self.state.value}; only forming bodies can be moved")
        self.position = vec_add(self.position, as_vec3(delta))

    def launch(self) -> None:
        if self.is_active:
            raise InvalidLifecycleTransition(f"{self.name} is already active")
        self.state = LifecycleState.ACTIVE

    def snapshot(self) -> "BodySnapshot":
        return BodySnapshot(
            handle=self.handle,
            name=self.name,
            position=self.position,
            velocity=self.velocity,
            mass=self._mass,
            radius=self._radius,
            color=self.color,
            state=self.state,
            trail=tuple(self.trail.samples()) if self.trail is not None else (),
        )

    def __repr__(self) -> str:
        return f"<Body {self.handle} {self.name!r} {self.state.value} mass={self._mass:.3g} pos={self.position}>"


@dataclass(frozen=True)
class BodySnapshot:
    """Plain copy of a body for renderers; trail is oldest-first."""
    handle: int
    name: str
    position: Vec3
    velocity: Vec3
    mass: float
    radius: float
    color: Color
    state: LifecycleState
    trail: Tuple[Vec3, ...] = ()
