#!/usr/bin/env python3
"""
Mass/density to visual radius conversion.

A body is treated as a uniform sphere: volume = mass / density, and
r = cbrt(3V / 4pi). The physical radius in metres is divided by RADIUS_SCALE so the
result is in world units that look sensible next to the scene's distances.
"""
import math

from .constants import RADIUS_SCALE
from .errors import InvalidParameter


def body_radius(mass: float, density: float, scale: float = RADIUS_SCALE) -> float:
    """
    Visual radius of a body of `mass` kg and `density` kg/m^3.

    Raises InvalidParameter for non-positive mass or density.
    """
    if not mass > 0:
        raise InvalidParameter(f"mass must be > 0, got {mass!r}")
    if not density > 0:
        raise InvalidParameter(f"density must be > 0, got {density!r}")
    volume = mass / density
    return ((3.0 * volume) / (4.0 * math.pi)) ** (1.0 / 3.0) / scale
