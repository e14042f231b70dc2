import pytest

from gravity_core.constants import MOON_DENSITY, MOON_MASS
from gravity_core.data_models import Body
from gravity_core.simulation import Simulation


@pytest.fixture
def sim():
    return Simulation()


@pytest.fixture
def earth_moon(sim):
    """Launched Earth/Moon pair as (sim, earth handle, moon handle)."""
    earth = sim.create_body((0, 0, 0), (0, 0, 0), 5.972e24, 5515, name="Earth")
    moon = sim.create_body((3844, 0, 0), (0, 0, 228), 7.34767309e22, 3344, has_trail=True, name="Moon")
    sim.launch_body(earth)
    sim.launch_body(moon)
    return sim, earth, moon


@pytest.fixture
def make_body():
    """Factory for standalone bodies, launched unless active=False."""
    def _make(handle, position, mass=MOON_MASS, density=MOON_DENSITY, velocity=(0.0, 0.0, 0.0), active=True):
        body = Body(handle, position, velocity, mass, density)
        if active:
            body.launch()
        return body
    return _make
