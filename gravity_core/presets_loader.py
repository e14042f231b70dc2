#!/usr/bin/env python3
"""
Scene template loading utilities.

A template is a JSON file in templates/ describing the bodies to spawn into a
Simulation. Templates only seed a scene; nothing is ever written back.

Schema
======
Template JSON (templates/*.json):
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "simulation_speed": 1.0,           # optional, default None (keep current speed)
  "bodies": [
    {
      "name": "Moon",
      "mass": 7.34767309e22,
      "density": 3344,               # optional, default rocky body
      "position": [3844.0, 0.0, 0.0],
      "velocity": [0.0, 0.0, 228.0],
      "color": [0.8, 0.8, 0.8, 1.0], # optional RGBA 0..1
      "trail": true,                 # optional, default false
      "launched": true               # optional, default true
    }
  ]
}

Users can add their own JSON files into templates/ and they'll be picked up by the loader.
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import (
  DEFAULT_BODY_COLOR,
  DEFAULT_DENSITY,
  EARTH_DENSITY,
  EARTH_MASS,
  MOON_DENSITY,
  MOON_MASS,
)
from .data_models import Color
from .simulation import Simulation
from .utils import try_float
from .vector_utils import Vec3

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")


@dataclass
class BodySpec:
  name: str
  mass: float
  position: Vec3
  velocity: Vec3
  density: float = DEFAULT_DENSITY
  color: Color = DEFAULT_BODY_COLOR
  trail: bool = False
  launched: bool = True


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  except (OSError, ValueError) as exc:
    logger.warning("Could not read template %s: %s", path, exc)
    return None


def _coerce_color(c) -> Color:
  try:
    rgba = [max(0.0, min(1.0, float(v))) for v in c]
  except (TypeError, ValueError):
    return DEFAULT_BODY_COLOR
  if len(rgba) == 3:
    rgba.append(1.0)
  if len(rgba) != 4:
    return DEFAULT_BODY_COLOR
  return tuple(rgba)


def _vec3(v) -> Vec3:
  x, y, z = v
  return (float(x), float(y), float(z))


def _parse_speed(value, file_name: str) -> Optional[float]:
  if value is None:
    return None
  speed = try_float(value)
  if speed is None or not speed > 0:
    logger.warning("Ignoring simulation_speed %r in %s", value, file_name)
    return None
  return speed


def list_templates(templates_dir: str = TEMPLATES_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available templates."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(templates_dir):
    return items
  for fn in sorted(os.listdir(templates_dir)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(templates_dir, fn)) or {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_template(file_name: str, templates_dir: str = TEMPLATES_DIR) -> Tuple[List[BodySpec], Optional[float], str]:
  """
  Load a template JSON by file name.
  Returns (body specs, simulation speed or None, display name). Malformed bodies
  (missing fields, non-positive mass or density) are skipped, and an unusable
  speed is dropped, so every returned spec can be spawned.
  """
  data = _read_json(os.path.join(templates_dir, file_name)) or {}
  display_name = data.get("name") or os.path.splitext(file_name)[0]
  speed = _parse_speed(data.get("simulation_speed"), file_name)
  specs: List[BodySpec] = []
  for idx, b in enumerate(data.get("bodies", [])):
    try:
      spec = BodySpec(
        name=b.get("name", f"Body {idx + 1}"),
        mass=float(b["mass"]),
        density=float(b.get("density", DEFAULT_DENSITY)),
        position=_vec3(b["position"]),
        velocity=_vec3(b.get("velocity", (0.0, 0.0, 0.0))),
        color=_coerce_color(b.get("color", DEFAULT_BODY_COLOR)),
        trail=bool(b.get("trail", False)),
        launched=bool(b.get("launched", True)),
      )
      if not spec.mass > 0 or not spec.density > 0:
        raise ValueError(f"mass and density must be > 0, got {spec.mass!r} and {spec.density!r}")
      specs.append(spec)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
      logger.warning("Skipping body %d in %s: %s", idx, file_name, exc)
  return specs, speed, display_name


def spawn(sim: Simulation, specs: List[BodySpec]) -> List[int]:
  """Create (and launch, unless told otherwise) every spec; returns the handles."""
  handles = []
  with sim.lock:
    for spec in specs:
      h = sim.create_body(spec.position, spec.velocity, spec.mass, spec.density,
                          color=spec.color, has_trail=spec.trail, name=spec.name)
      if spec.launched:
        sim.launch_body(h)
      handles.append(h)
  return handles


def apply_template(sim: Simulation, file_name: str, templates_dir: str = TEMPLATES_DIR) -> str:
  """Replace the scene with a template. Returns its display name."""
  specs, speed, display_name = load_template(file_name, templates_dir)
  with sim.lock:
    sim.clear()
    spawn(sim, specs)
    if speed is not None:
      sim.set_simulation_speed(speed)
  logger.info("Loaded template %s (%d bodies)", display_name, len(specs))
  return display_name


def earth_moon_specs() -> List[BodySpec]:
  """The default scene: a trailed grey Moon on an eccentric orbit around a blue Earth."""
  return [
    BodySpec("Moon", MOON_MASS, (3844.0, 0.0, 0.0), (0.0, 0.0, 228.0),
             density=MOON_DENSITY, color=(0.8, 0.8, 0.8, 1.0), trail=True),
    BodySpec("Earth", EARTH_MASS, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0),
             density=EARTH_DENSITY, color=(0.0, 0.3, 0.8, 1.0)),
  ]


def build_earth_moon_scene(sim: Simulation) -> List[int]:
  with sim.lock:
    sim.clear()
    return spawn(sim, earth_moon_specs())
