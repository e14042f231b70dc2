#!/usr/bin/env python3
"""
Shared constants for the Gravity Simulator.

Units
- Positions are in scaled world units; one unit is one kilometre (UNIT_TO_METERS).
- Masses are in kilograms, densities in kg/m^3.
- G and C are SI.

The integration divisors (ACCEL_SCALE, POSITION_SCALE) tie the per-frame update to
the visual scale of the scene. They were tuned by eye and have no derivation;
changing them changes the simulated motion.
"""

# Physical constants
G = 6.6743e-11  # m^3 kg^-1 s^-2
C = 299792458.0  # m/s
EARTH_MASS = 5.97219e24  # kg
MOON_MASS = 7.34767309e22  # kg
EARTH_DENSITY = 5515.0  # kg/m^3
MOON_DENSITY = 3344.0  # kg/m^3

# Body defaults
DEFAULT_DENSITY = MOON_DENSITY  # rocky body
INITIAL_MASS = 1e20  # kg, mass of a freshly spawned body
DEFAULT_BODY_COLOR = (1.0, 0.0, 0.0, 1.0)  # RGBA, 0..1

# Scales
RADIUS_SCALE = 100000.0  # metres of physical radius per world unit of visual radius
UNIT_TO_METERS = 1000.0
ACCEL_SCALE = 96.0
POSITION_SCALE = 94.0

# Collisions
COLLISION_DAMPING = -0.2

# Trails
TRAIL_SAMPLE_INTERVAL = 5  # ticks between samples
TRAIL_CAPACITY = 30

# Curvature field
CURVATURE_VIS_SCALE = 100.0
CURVATURE_DIVISOR = 15.0
CURVATURE_BASELINE = 3000.0
GRID_SIZE = 10000.0
GRID_DIVISIONS = 50
GRID_HEIGHT_FRACTION = 0.3  # grid plane sits at -size/2 * fraction + 3 steps

# Controls
SPEED_PRESETS = {
    0: 1.0,
    1: 0.5,
    2: 2.0,
    3: 5.0,
    4: 10.0,
}
GROW_MULTIPLIER_PER_SECOND = 2.0
NUDGE_STEP = 0.5  # world units per arrow-key press

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
GRID_COLOR = (90, 95, 110)
TRAIL_COLOR = (255, 0, 0)
FIELD_OF_VIEW_DEG = 45.0
NEAR_PLANE = 0.1
FAR_PLANE = 750000.0

# Camera
CAMERA_START = (0.0, 1000.0, 5000.0)
CAMERA_MOVE_SPEED = 1000.0  # units per second
CAMERA_BOOST = 5.0
CAMERA_SCROLL_SPEED = 50000.0
MOUSE_SENSITIVITY = 0.1
MAX_PITCH_DEG = 89.0

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
