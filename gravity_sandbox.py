#!/usr/bin/env python3
"""
Gravity Sandbox application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame viewport thread and the Dear PyGui control
  window (running on the main thread).
- Maintains a shared SimulationController that owns the Simulation; all access
  is guarded by a re-entrant lock for thread-safety.
- Translates viewport input into StepInput snapshots: pointer position, right
  button press/release edges, window size and frame time.

Threading model
- PygameRenderer runs in a background thread: it samples input, steps the
  simulation under the lock, keeps the returned StepOutput and draws from it
  after releasing the lock.
- The UI class runs in the main thread via Dear PyGui. It edits settings and
  play state through SimulationController methods, which are lock-protected.

Controls
- Right-drag in the viewport: spawn a body at the press point, launched away
  from the release point. Space: pause/play. C: clear all bodies.

Running
1) Install dependencies: `pip install pygame dearpygui`
2) Run this module: `python gravity_sandbox.py`
   An optional settings.json next to this file overrides the physics defaults.
"""

import logging
import math
import threading
import time
from typing import List, Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from nbody_sandbox.constants import (
    BACKGROUND_COLOR,
    BODY_OUTLINE_COLOR,
    DRAG_LINE_COLOR,
    DRAG_LINE_WIDTH,
    HUD_TEXT_COLOR,
    MIN_DRAW_RADIUS,
    TARGET_FPS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from nbody_sandbox.data_models import StepInput, StepOutput
from nbody_sandbox.settings_loader import SimulationSettings, load_settings
from nbody_sandbox.simulation import Simulation

logger = logging.getLogger("nbody_sandbox")

SPAWN_BUTTON = 3  # right mouse button
MAX_FRAME_DT = 0.1  # seconds; longer stalls (window drag, breakpoints) are cut short

# ============================================================
# Simulation Controller (Shared State)
# ============================================================


class SimulationController:
    """
    Shared state between UI thread (DearPyGui) and rendering thread (Pygame).
    Includes thread-safe operations guarded by a lock.
    """
    def __init__(self, settings: Optional[SimulationSettings] = None):
        self.lock = threading.RLock()
        self.sim = Simulation(settings)
        self.running = True  # app running
        self.playing = True  # simulation running
        self.step_requested = False
        self.last_output = StepOutput()
        self.last_collision_msg: Optional[str] = None
        self.collision_count = 0

    @property
    def settings(self) -> SimulationSettings:
        return self.sim.settings

    def advance(self, dt: float, inp: StepInput) -> StepOutput:
        """Run one frame; paused frames only process spawn input."""
        with self.lock:
            if self.playing or self.step_requested:
                out = self.sim.step(min(dt, MAX_FRAME_DT), inp)
                self.step_requested = False
            else:
                out = self.sim.idle(inp)
            if out.events:
                self.collision_count += len(out.events)
                self.last_collision_msg = out.events[-1].describe()
            self.last_output = out
            return out

    def pause_and_step(self):
        """Stop playback and advance exactly one frame."""
        with self.lock:
            self.playing = False
            self.step_requested = True

    def toggle_play(self) -> bool:
        with self.lock:
            self.playing = not self.playing
            return self.playing

    def clear(self):
        with self.lock:
            self.sim.clear()
            self.last_output = self.sim.idle()

    def update_setting(self, name: str, value):
        with self.lock:
            self.sim.settings.update({name: value})
            self.sim.apply_settings()

    def totals(self) -> Tuple[float, Tuple[float, float]]:
        with self.lock:
            return self.sim.store.total_mass(), self.sim.store.total_momentum()

# ============================================================
# Pygame Renderer Thread
# ============================================================


class PygameRenderer(threading.Thread):
    """
    Pygame loop: samples input, steps the simulation, draws bodies and the
    spawn drag line. World coordinates are window pixels (no camera).
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True)
        self.sim = sim
        self.surface = None
        self.clock = None
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)
        self.running = True

    def run(self):
        pygame.init()
        pygame.display.set_caption("Gravity Sandbox - Viewport")
        self.surface = pygame.display.set_mode(self.viewport_size, pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

        last_time = time.perf_counter()
        while self.running and self.sim.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            inp = self.handle_events()
            out = self.sim.advance(real_dt, inp)
            self.draw(out)

            self.clock.tick(TARGET_FPS)

        pygame.quit()

    def pointer(self) -> Optional[Tuple[float, float]]:
        if not pygame.mouse.get_focused():
            return None
        x, y = pygame.mouse.get_pos()
        return (float(x), float(y))

    def handle_events(self) -> StepInput:
        pressed = False
        released = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.sim.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.viewport_size = (event.w, event.h)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == SPAWN_BUTTON:
                pressed = True

            elif event.type == pygame.MOUSEBUTTONUP and event.button == SPAWN_BUTTON:
                released = True

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    self.sim.toggle_play()
                elif event.key == pygame.K_c:
                    self.sim.clear()

        return StepInput(
            viewport=(float(self.viewport_size[0]), float(self.viewport_size[1])),
            pointer=self.pointer(),
            spawn_pressed=pressed,
            spawn_released=released,
        )

    def draw(self, out: StepOutput):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        for b in out.bodies:
            pos = _safe_point(b.position)
            if pos is None:
                continue
            r = max(MIN_DRAW_RADIUS, int(round(b.radius)))
            try:
                gfxdraw.filled_circle(surf, pos[0], pos[1], r, b.color)
                gfxdraw.aacircle(surf, pos[0], pos[1], r, BODY_OUTLINE_COLOR)
            except (OverflowError, TypeError):
                continue

        preview = out.preview
        if preview.visible:
            start = _safe_point(preview.start)
            end = _safe_point(preview.end)
            if start and end:
                pygame.draw.line(surf, DRAG_LINE_COLOR, start, end, DRAG_LINE_WIDTH)

        with self.sim.lock:
            playing = self.sim.playing
        draw_text(surf, "Right-drag: launch body | Space: Pause/Play | C: Clear", 10, 10, HUD_TEXT_COLOR)
        draw_text(surf, f"Bodies: {len(out.bodies)}  [{'Playing' if playing else 'Paused'}]", 10, 30, HUD_TEXT_COLOR)

        pygame.display.flip()


_cached_font = None


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        _cached_font = pygame.font.SysFont("consolas", 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


SAFE_COORD_LIMIT = 30000


def _safe_point(pt):
    if not (math.isfinite(pt[0]) and math.isfinite(pt[1])):
        return None
    x, y = int(pt[0]), int(pt[1])
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

# ============================================================
# Dear PyGui UI
# ============================================================


# (settings field, label, min, max, format)
FLOAT_SLIDERS = [
    ("gravitational", "Gravity G", 0.0001, 10.0, "%.4f"),
    ("ke_threshold", "Absorb KE / mass", 0.1, 1000.0, "%.1f"),
    ("boundary_strength", "Wall strength", 1.0, 100000.0, "%.0f"),
    ("spawn_mass", "Spawn mass", 100.0, 1000000.0, "%.0f"),
    ("spawn_velocity_coefficient", "Launch scale", 0.1, 100.0, "%.1f"),
    ("radius_coefficient", "Radius coefficient", 1.0, 10000.0, "%.0f"),
]


class UI:
    """
    Dear PyGui interface: simulation controls, live physics tuning and a
    read-only body inspector.
    """
    def __init__(self, sim: SimulationController):
        self.sim = sim
        self.status_msg_id = None
        self.count_id = None
        self.totals_id = None
        self.body_list_id = None
        self.play_button_id = None
        self.slider_ids = {}

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (~10Hz)."""
        current = dpg.get_frame_count()
        dpg.set_frame_callback(current + 6, self._sync_ui_with_sim)

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Gravity Sandbox - Controls', width=460, height=640)

        settings = self.sim.settings
        with dpg.window(label="Controls", width=440, height=620, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                self.play_button_id = dpg.add_button(label="Pause", callback=self._toggle_play)
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_button(label="Clear", callback=self._clear)
            self.status_msg_id = dpg.add_text("")

            dpg.add_separator()
            dpg.add_text("Physics")
            for name, label, lo, hi, fmt in FLOAT_SLIDERS:
                self.slider_ids[name] = dpg.add_slider_float(
                    label=label,
                    default_value=float(getattr(settings, name)),
                    min_value=lo,
                    max_value=hi,
                    format=fmt,
                    width=220,
                    callback=self._on_setting,
                    user_data=name,
                )
            dpg.add_checkbox(label="Collisions", default_value=settings.collisions_enabled,
                             callback=self._on_setting, user_data="collisions_enabled")

            dpg.add_separator()
            dpg.add_text("Bodies")
            self.count_id = dpg.add_text("Count: 0")
            self.totals_id = dpg.add_text("Mass: 0  Momentum: (0, 0)")
            self.body_list_id = dpg.add_listbox(items=[], width=420, num_items=12)

        dpg.setup_dearpygui()
        dpg.show_viewport()

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _toggle_play(self):
        playing = self.sim.toggle_play()
        self._set_status(f"Simulation {'Playing' if playing else 'Paused'}.")

    def _step_once(self):
        self.sim.pause_and_step()
        self._set_status("Stepped one frame.")

    def _clear(self):
        self.sim.clear()
        self._set_status("Cleared all bodies.")

    def _on_setting(self, sender, app_data, user_data):
        self.sim.update_setting(user_data, app_data)
        # Reflect the accepted value so rejected edits snap back
        dpg.set_value(sender, getattr(self.sim.settings, user_data))

    def _body_rows(self, out: StepOutput) -> List[str]:
        return [
            f"#{b.id:<4} m={b.mass:<9.0f} r={b.radius:5.2f} "
            f"v=({b.velocity[0]:7.1f}, {b.velocity[1]:7.1f})"
            for b in out.bodies
        ]

    def _sync_ui_with_sim(self):
        """Periodic UI update: play state, body list and the last collision."""
        if not self.sim.running:
            dpg.stop_dearpygui()
            return
        with self.sim.lock:
            out = self.sim.last_output
            playing = self.sim.playing
            msg = self.sim.last_collision_msg
            self.sim.last_collision_msg = None
            collisions = self.sim.collision_count
        mass, momentum = self.sim.totals()

        dpg.configure_item(self.play_button_id, label="Pause" if playing else "Play")
        dpg.set_value(self.count_id, f"Count: {len(out.bodies)}  Collisions: {collisions}")
        dpg.set_value(self.totals_id, f"Mass: {mass:.0f}  Momentum: ({momentum[0]:.1f}, {momentum[1]:.1f})")
        dpg.configure_item(self.body_list_id, items=self._body_rows(out))
        if msg:
            self._set_status(msg)
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sim = SimulationController(load_settings())
    logger.info("Starting Gravity Sandbox (%dx%d viewport)", VIEW_WIDTH, VIEW_HEIGHT)

    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(sim)

    with dpg.handler_registry():
        def key_press(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_press)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        sim.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()


if __name__ == "__main__":
    main()
