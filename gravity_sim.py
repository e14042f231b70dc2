#!/usr/bin/env python3
"""
Gravity Simulator application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Both talk to one gravity_core Simulation, which owns the bodies and settings and
  serializes every command with its own re-entrant lock.
- The viewport draws the curvature grid, the bodies and their fading trails from
  snapshots; it never holds live bodies.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the viewport),
  ticking the simulation once per frame, and drawing.
- The UI class runs in the main thread via Dear PyGui. It refreshes its readouts on a
  periodic frame callback and calls Simulation methods for user commands.

Viewport controls
- Left mouse press: spawn a forming body at the origin; hold right mouse to grow it;
  release left mouse to launch it.
- Arrows: move the forming body (Shift+Up/Down moves it vertically).
- WASD / Space / Left Shift: fly; hold X for 5x camera speed; wheel: dolly.
- Tab: toggle mouse look. Hold K: pause. 0-4: speed presets. Q: quit.

Running
1) Install dependencies: `pip install -e .`
2) Run this module: `python gravity_sim.py`
"""

import logging
import sys
import threading
import time
from typing import List, Optional

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from gravity_core.camera import Camera3D
from gravity_core.constants import (
    BACKGROUND_COLOR,
    CAMERA_BOOST,
    CAMERA_MOVE_SPEED,
    CAMERA_SCROLL_SPEED,
    GRID_COLOR,
    GRID_DIVISIONS,
    GRID_SIZE,
    GROW_MULTIPLIER_PER_SECOND,
    INITIAL_MASS,
    NUDGE_STEP,
    SAFE_COORD_LIMIT,
    SPEED_PRESETS,
    TRAIL_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from gravity_core.data_models import BodySnapshot, LifecycleState
from gravity_core.errors import SimulationError
from gravity_core.presets_loader import apply_template, build_earth_moon_scene, list_templates
from gravity_core.simulation import Simulation
from gravity_core.utils import rgba_to_rgb255, try_float

logger = logging.getLogger("gravity_sim")

BUILTIN_SCENE = "Earth and Moon (built-in)"
EMPTY_SCENE = "Empty"

SPEED_KEYS = {
    pygame.K_0: SPEED_PRESETS[0],
    pygame.K_1: SPEED_PRESETS[1],
    pygame.K_2: SPEED_PRESETS[2],
    pygame.K_3: SPEED_PRESETS[3],
    pygame.K_4: SPEED_PRESETS[4],
}

# ============================================================
# Pygame viewport
# ============================================================


class PygameRenderer(threading.Thread):
    """
    Pygame loop: ticks the simulation, draws grid, bodies and trails.
    Handles body spawning/growing/launching and the fly camera.
    """
    def __init__(self, sim: Simulation):
        super().__init__(daemon=True)
        self.sim = sim
        self.camera = Camera3D()
        self.surface = None
        self.clock = None
        self.running = True
        self.mouse_look = True
        self.forming_handle: Optional[int] = None
        self.new_body_trails = False
        self.last_message: Optional[str] = None

    def run(self):
        pygame.init()
        pygame.display.set_caption("Gravity Simulator - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        self._set_mouse_look(True)

        last_time = time.perf_counter()
        while self.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            self.handle_events(real_dt)
            if not self.running:
                break

            self.sim.tick(real_dt)
            self.draw()

            # Limit FPS
            self.clock.tick(60)

        pygame.quit()

    # -----------------------
    # Input
    # -----------------------

    def _set_mouse_look(self, enabled: bool):
        self.mouse_look = enabled
        pygame.event.set_grab(enabled)
        pygame.mouse.set_visible(not enabled)
        pygame.mouse.get_rel()  # drop the motion accumulated so far

    def _report(self, msg: str):
        logger.warning(msg)
        self.last_message = msg

    def _spawn_forming_body(self):
        if self.forming_handle is not None:
            return
        self.forming_handle = self.sim.create_body(
            (0.0, 0.0, 0.0), (0.0, 0.0, 0.0), INITIAL_MASS, has_trail=self.new_body_trails)

    def _launch_forming_body(self):
        handle, self.forming_handle = self.forming_handle, None
        if handle is None:
            return
        try:
            self.sim.launch_body(handle)
        except SimulationError as exc:
            self._report(f"Launch failed: {exc}")

    def _nudge_forming_body(self, delta):
        if self.forming_handle is None:
            return
        try:
            self.sim.nudge_body(self.forming_handle, delta)
        except SimulationError as exc:
            self._report(f"Move failed: {exc}")
            self.forming_handle = None

    def handle_events(self, real_dt):
        keys = pygame.key.get_pressed()
        step = CAMERA_MOVE_SPEED * real_dt * (CAMERA_BOOST if keys[pygame.K_x] else 1.0)
        forward = (keys[pygame.K_w] - keys[pygame.K_s]) * step
        right = (keys[pygame.K_d] - keys[pygame.K_a]) * step
        up = (keys[pygame.K_SPACE] - keys[pygame.K_LSHIFT]) * step
        if forward or right or up:
            self.camera.move(forward, right, up)

        # Grow while the right button is held
        if self.forming_handle is not None and pygame.mouse.get_pressed()[2]:
            try:
                self.sim.grow_body(self.forming_handle, GROW_MULTIPLIER_PER_SECOND, real_dt)
            except SimulationError as exc:
                self._report(f"Grow failed: {exc}")
                self.forming_handle = None

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                self.camera.move(forward=event.y * CAMERA_SCROLL_SPEED * max(real_dt, 1 / 120.0))

            elif event.type == pygame.MOUSEMOTION:
                if self.mouse_look:
                    dx, dy = event.rel
                    self.camera.look(dx, dy)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._spawn_forming_body()

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._launch_forming_body()

            elif event.type == pygame.KEYDOWN:
                shift = bool(event.mod & pygame.KMOD_SHIFT)
                if event.key == pygame.K_q:
                    self.running = False
                elif event.key == pygame.K_TAB:
                    self._set_mouse_look(not self.mouse_look)
                elif event.key == pygame.K_k:
                    self.sim.set_paused(True)
                elif event.key in SPEED_KEYS:
                    self.sim.set_simulation_speed(SPEED_KEYS[event.key])
                elif event.key == pygame.K_RIGHT:
                    self._nudge_forming_body((NUDGE_STEP, 0.0, 0.0))
                elif event.key == pygame.K_LEFT:
                    self._nudge_forming_body((-NUDGE_STEP, 0.0, 0.0))
                elif event.key == pygame.K_UP:
                    self._nudge_forming_body((0.0, NUDGE_STEP, 0.0) if shift else (0.0, 0.0, NUDGE_STEP))
                elif event.key == pygame.K_DOWN:
                    self._nudge_forming_body((0.0, -NUDGE_STEP, 0.0) if shift else (0.0, 0.0, -NUDGE_STEP))

            elif event.type == pygame.KEYUP and event.key == pygame.K_k:
                self.sim.set_paused(False)

    # -----------------------
    # Drawing
    # -----------------------

    def draw_grid(self, surf):
        vertices = self.sim.curvature_grid(GRID_SIZE, GRID_DIVISIONS)
        project = self.camera.project
        for i in range(0, len(vertices) - 1, 2):
            a = project(vertices[i])
            b = project(vertices[i + 1])
            if a is None or b is None:
                continue
            pa = _safe_point(a)
            pb = _safe_point(b)
            if pa and pb:
                pygame.draw.aaline(surf, GRID_COLOR, pa, pb)

    def draw_trail(self, surf, body: BodySnapshot):
        n = len(body.trail)
        for i, p in enumerate(body.trail):
            proj = self.camera.project(p)
            if proj is None:
                continue
            pt = _safe_point(proj)
            if not pt:
                continue
            # Older samples fade toward the background
            alpha = (i + 1) / n
            color = tuple(int(bg + (fg - bg) * alpha) for fg, bg in zip(TRAIL_COLOR, BACKGROUND_COLOR))
            r = max(1, int(self.camera.projected_radius(body.radius * 0.3, proj[2])))
            gfxdraw.filled_circle(surf, pt[0], pt[1], min(r, 50), color)

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        self.draw_grid(surf)

        bodies = self.sim.snapshot_bodies()
        for b in bodies:
            if b.trail:
                self.draw_trail(surf, b)

        # Far to near so closer bodies overlap farther ones
        projected = []
        for b in bodies:
            proj = self.camera.project(b.position)
            if proj is not None:
                projected.append((proj[2], proj, b))
        projected.sort(key=lambda item: item[0], reverse=True)

        for depth, proj, b in projected:
            pt = _safe_point(proj)
            if not pt:
                continue
            vis_r = max(2, min(int(self.camera.projected_radius(b.radius, depth)), 400))
            color = rgba_to_rgb255(b.color)
            gfxdraw.filled_circle(surf, pt[0], pt[1], vis_r, color)
            gfxdraw.aacircle(surf, pt[0], pt[1], vis_r, color)
            if b.state is LifecycleState.FORMING:
                gfxdraw.aacircle(surf, pt[0], pt[1], vis_r + 4, (255, 255, 0))

        # HUD text
        draw_text(surf, "LMB: spawn/launch | RMB: grow | Arrows: place | WASD/Space/Shift: fly | Tab: mouse look | K: pause | 0-4: speed | Q: quit", 10, 10, (200, 200, 200))
        paused = self.sim.paused
        draw_text(surf, f"Speed: {self.sim.simulation_speed:.1f}x  [{'Paused' if paused else 'Running'}]  Bodies: {len(bodies)}", 10, 30, (200, 200, 200))

        pygame.display.flip()


_cached_font = None


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (OSError, pygame.error):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

# ============================================================
# Dear PyGui UI
# ============================================================


class UI:
    """
    Dear PyGui interface: scene presets, simulation controls, body list and diagnostics.
    """
    def __init__(self, sim: Simulation, renderer: PygameRenderer):
        self.sim = sim
        self.renderer = renderer

        self.status_msg_id = None
        self.body_list_id = None
        self.body_info_id = None
        self.stats_id = None
        self.energy_id = None

        self._template_map = {}
        self._list_handles: List[int] = []

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        current = dpg.get_frame_count()
        dpg.set_frame_callback(current + 6, self._sync_ui_with_sim)

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Gravity Simulator - Controls', width=520, height=720)

        with dpg.window(label="Controls", width=500, height=700, pos=(10, 10), tag="main_window"):
            dpg.add_text("Scene")
            with dpg.group(horizontal=True):
                for fn, display in list_templates():
                    self._template_map[display] = fn
                preset_items = [BUILTIN_SCENE, EMPTY_SCENE] + list(self._template_map.keys())
                dpg.add_combo(preset_items, default_value=BUILTIN_SCENE, width=260, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_template(dpg.get_value("preset_combo")))

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="Paused", default_value=False, tag="pause_checkbox",
                                 callback=lambda s, a, u: self._set_paused(a))
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_checkbox(label="Collisions", default_value=True,
                                 callback=lambda s, a, u: self._toggle_collisions(a))
                dpg.add_checkbox(label="Trail on new bodies", default_value=False,
                                 callback=lambda s, a, u: self._toggle_new_body_trails(a))
            with dpg.group(horizontal=True):
                dpg.add_text("Speed (x):")
                dpg.add_slider_float(min_value=0.1, max_value=10.0, default_value=1.0, width=200,
                                     callback=lambda s, a, u: self._set_speed(a), tag="speed_slider")
                dpg.add_input_text(default_value="1.0", width=60, tag="speed_input", on_enter=True,
                                   callback=lambda s, a, u: self._set_speed(try_float(a)))
            with dpg.group(horizontal=True):
                for key in sorted(SPEED_PRESETS):
                    value = SPEED_PRESETS[key]
                    dpg.add_button(label=f"{value:g}x", callback=lambda s, a, u: self._set_speed(u), user_data=value)

            dpg.add_separator()

            dpg.add_text("Bodies")
            self.body_list_id = dpg.add_listbox(items=[], width=480, num_items=6)
            with dpg.group(horizontal=True):
                dpg.add_button(label="Launch Selected", callback=self._launch_selected)
                dpg.add_button(label="Remove Selected", callback=self._remove_selected)
            self.body_info_id = dpg.add_text("")

            dpg.add_separator()

            dpg.add_text("Diagnostics")
            self.stats_id = dpg.add_text("")
            self.energy_id = dpg.add_text("")

            dpg.add_separator()
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        logger.warning(msg)
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _selected_handle(self) -> Optional[int]:
        value = dpg.get_value(self.body_list_id)
        if not value:
            return None
        return int(value.split(":", 1)[0])

    def _set_speed(self, value):
        if value is None:
            self._set_error("Speed must be a number.")
            return
        try:
            self.sim.set_simulation_speed(value)
        except SimulationError as exc:
            self._set_error(str(exc))
            return
        dpg.set_value("speed_slider", float(value))
        dpg.set_value("speed_input", f"{float(value):g}")
        self._set_status(f"Simulation speed: {float(value):g}x")

    def _set_paused(self, value):
        self.sim.set_paused(bool(value))
        self._set_status("Simulation paused." if value else "Simulation running.")

    def _step_once(self):
        # Perform a single tick while paused
        with self.sim.lock:
            was_paused = self.sim.paused
            self.sim.set_paused(False)
            self.sim.tick(1 / 60.0)
            self.sim.set_paused(was_paused)
        self._set_status("Stepped one tick.")

    def _toggle_collisions(self, value):
        with self.sim.lock:
            self.sim.collisions.enable = bool(value)
        self._set_status(f"Collisions {'ON' if value else 'OFF'}.")

    def _toggle_new_body_trails(self, value):
        self.renderer.new_body_trails = bool(value)

    def _launch_selected(self):
        handle = self._selected_handle()
        if handle is None:
            self._set_error("No body selected.")
            return
        try:
            self.sim.launch_body(handle)
        except SimulationError as exc:
            self._set_error(str(exc))
            return
        if self.renderer.forming_handle == handle:
            self.renderer.forming_handle = None
        self._set_status(f"Launched body {handle}.")

    def _remove_selected(self):
        handle = self._selected_handle()
        if handle is None:
            self._set_error("No body selected.")
            return
        try:
            self.sim.remove_body(handle)
        except SimulationError as exc:
            self._set_error(str(exc))
            return
        if self.renderer.forming_handle == handle:
            self.renderer.forming_handle = None
        self._set_status(f"Removed body {handle}.")

    def load_template(self, name: str):
        self.renderer.forming_handle = None
        try:
            if name == BUILTIN_SCENE:
                build_earth_moon_scene(self.sim)
            elif name == EMPTY_SCENE:
                self.sim.clear()
            elif name in self._template_map:
                apply_template(self.sim, self._template_map[name])
                self._set_speed(self.sim.simulation_speed)
            else:
                self._set_error(f"Unknown preset: {name}")
                return
        except SimulationError as exc:
            self._set_error(f"Could not load {name}: {exc}")
            return
        self._set_status(f"Loaded scene: {name}")

    def _sync_ui_with_sim(self):
        """
        Periodic UI update: body list, selected body readout, diagnostics.
        """
        bodies = self.sim.snapshot_bodies()
        items = [f"{b.handle}: {b.name} [{b.state.value}]" for b in bodies]
        selected = self._selected_handle()
        dpg.configure_item(self.body_list_id, items=items)
        self._list_handles = [b.handle for b in bodies]
        if selected in self._list_handles:
            dpg.set_value(self.body_list_id, items[self._list_handles.index(selected)])
            b = bodies[self._list_handles.index(selected)]
            dpg.set_value(self.body_info_id,
                          f"mass {b.mass:.3e} kg  radius {b.radius:.2f}\n"
                          f"pos ({b.position[0]:.1f}, {b.position[1]:.1f}, {b.position[2]:.1f})\n"
                          f"vel ({b.velocity[0]:.2f}, {b.velocity[1]:.2f}, {b.velocity[2]:.2f})")
        else:
            dpg.set_value(self.body_info_id, "")

        stats = self.sim.stats()
        dpg.set_value(self.stats_id,
                      f"ticks {stats.ticks}  sim time {stats.simulated_seconds:.1f} s  "
                      f"tick {stats.mean_tick_ms:.2f} ms  bodies {stats.active_count}/{stats.body_count} active")
        dpg.set_value(self.energy_id,
                      f"E_k {self.sim.kinetic_energy():.3e} J  E_p {self.sim.potential_energy():.3e} J  "
                      f"E {self.sim.total_energy():.3e} J")
        dpg.set_value("pause_checkbox", self.sim.paused)

        msg, self.renderer.last_message = self.renderer.last_message, None
        if msg:
            self._set_status(msg, color=(255, 120, 120))

        if not self.renderer.running:
            dpg.stop_dearpygui()
            return
        # Reschedule next sync
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    sim = Simulation()

    # Ensure a working default scene is present before any UI callbacks
    build_earth_moon_scene(sim)

    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    UI(sim, renderer)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
