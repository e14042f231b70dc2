#!/usr/bin/env python3
"""
Stylized curvature field.

The field gives every sample point a scalar "well depth" from the current bodies.
It is a visualization aid, not general relativity: each body contributes the
height of a Flamm paraboloid built from its Schwarzschild radius,

    rs = 2 G m / c^2
    z  = 2 * sqrt(rs * (r - rs)) * vis_scale     for r > rs, else 0

with r the distance from the sample point to the body in metres. Contributions are
summed and passed through an output transform (divide, then subtract a baseline) so
the grid sits at a useful height in the scene.

Nothing is cached; every call reads the bodies as they are now. The grid helpers
build the flat line grid of the viewport and lift it to the sampled heights.
"""
import math
from typing import Iterable, List, Sequence

from .constants import (
    C,
    CURVATURE_BASELINE,
    CURVATURE_DIVISOR,
    CURVATURE_VIS_SCALE,
    G,
    GRID_DIVISIONS,
    GRID_HEIGHT_FRACTION,
    GRID_SIZE,
    UNIT_TO_METERS,
)
from .data_models import Body
from .errors import InvalidParameter
from .vector_utils import Vec3, as_vec3, vec_dist


class CurvatureTransform:
    """Display transform applied to the summed displacement: total / divisor - baseline."""

    def __init__(self, divisor: float = CURVATURE_DIVISOR, baseline: float = CURVATURE_BASELINE):
        if divisor == 0:
            raise InvalidParameter("curvature divisor must be non-zero")
        self.divisor = float(divisor)
        self.baseline = float(baseline)

    def apply(self, total: float) -> float:
        return total / self.divisor - self.baseline


class CurvatureField:
    def __init__(self, gravitational_constant: float = G, speed_of_light: float = C,
                 unit_to_meters: float = UNIT_TO_METERS, vis_scale: float = CURVATURE_VIS_SCALE,
                 transform: CurvatureTransform = None):
        self.G = float(gravitational_constant)
        self.c = float(speed_of_light)
        self.unit_to_meters = float(unit_to_meters)
        self.vis_scale = float(vis_scale)
        self.transform = transform if transform is not None else CurvatureTransform()

    def schwarzschild_radius(self, mass: float) -> float:
        return 2.0 * self.G * mass / (self.c * self.c)

    def contribution(self, point: Vec3, body: Body) -> float:
        """Raw displacement one body adds at `point`; zero inside its Schwarzschild radius."""
        rs = self.schwarzschild_radius(body.mass)
        r = vec_dist(point, body.position) * self.unit_to_meters
        if r <= rs:
            return 0.0
        return 2.0 * math.sqrt(rs * (r - rs)) * self.vis_scale

    def displacement(self, point, bodies: Iterable[Body]) -> float:
        """Summed raw displacement at `point`, before the output transform."""
        p = as_vec3(point)
        return sum(self.contribution(p, b) for b in bodies)

    def sample(self, point, bodies: Iterable[Body]) -> float:
        return self.transform.apply(self.displacement(point, bodies))

    def sample_many(self, points: Iterable, bodies: Sequence[Body]) -> List[float]:
        """One transformed value per input point, in input order."""
        bodies = list(bodies)
        return [self.sample(p, bodies) for p in points]


def grid_points(size: float = GRID_SIZE, divisions: int = GRID_DIVISIONS, height: float = None) -> List[Vec3]:
    """
    Vertices of a square line grid in the x/z plane, as consecutive segment endpoints.

    Lines parallel to x come first, then lines parallel to z. The plane sits at
    `height`, or by default at 3 cells above -size/2 * GRID_HEIGHT_FRACTION.
    """
    if size <= 0:
        raise InvalidParameter(f"grid size must be > 0, got {size!r}")
    if int(divisions) < 1:
        raise InvalidParameter(f"grid divisions must be >= 1, got {divisions!r}")
    divisions = int(divisions)
    step = size / divisions
    half = size / 2.0
    y = -half * GRID_HEIGHT_FRACTION + 3 * step if height is None else float(height)

    vertices: List[Vec3] = []
    for zi in range(divisions + 1):
        z = -half + zi * step
        for xi in range(divisions):
            x0 = -half + xi * step
            vertices.append((x0, y, z))
            vertices.append((x0 + step, y, z))
    for xi in range(divisions + 1):
        x = -half + xi * step
        for zi in range(divisions):
            z0 = -half + zi * step
            vertices.append((x, y, z0))
            vertices.append((x, y, z0 + step))
    return vertices


def displaced_grid(points: Sequence[Vec3], values: Sequence[float]) -> List[Vec3]:
    """Replace each point's height (y) with its sampled value."""
    if len(points) != len(values):
        raise InvalidParameter(f"got {len(points)} points but {len(values)} values")
    return [(p[0], v, p[2]) for p, v in zip(points, values)]
