"""
Interactive Pygame Viewer for Galaxy Fields

Renders the active particle field with the headless point renderer and
shows a side panel of parameter sliders. Dragging a slider edits the
parameter model live; releasing it commits, which regenerates the field.
A failed commit (illegal value, allocation failure) keeps the previous
galaxy on screen and reverts the edit.

Controls:
  SPACE       Toggle auto-rotate
  R           Regenerate with the current parameters (new random draw)
  TAB         Toggle control panel
  S           Save screenshot
  H           Toggle HUD overlay
  1-9         Select preset
  Q / ESC     Quit
"""

import os
import time

import numpy as np
import pygame

from .colors import to_rgb255
from .controls import ControlPanel, THEME
from .drawable import Scene
from .errors import GalaxyFieldError, ValidationError
from .lifecycle import GalaxyField
from .params import INTEGER_FIELDS, SLIDER_DEFS, ParameterModel
from .presets import PRESETS, PRESET_ORDER, DEFAULT_PRESET, get_preset, preset_parameters
from .render import Camera, render_scene
from .sources import make_source


PANEL_WIDTH = 300
ROTATE_SPEED = 0.1  # rad/s

# Every frame re-projects the whole field while rotating; above this many
# particles rotation starts paused and the render target shrinks
AUTO_ROTATE_LIMIT = 250_000

_COLOR_KEYS = (("inside_color", "Inside"), ("outside_color", "Outside"))
_CHANNELS = ("R", "G", "B")


def render_scale_for(count):
    """Fraction of the canvas resolution to render at for `count` particles."""
    if count <= AUTO_ROTATE_LIMIT:
        return 0.75
    if count <= 2 * AUTO_ROTATE_LIMIT:
        return 0.6
    return 0.5


class Viewer:
    def __init__(self, width=900, height=900, start_preset=DEFAULT_PRESET,
                 seed=None, overrides=None):
        self.canvas_w = width
        self.canvas_h = height
        self.panel_visible = True
        self.running = True
        self.show_hud = True
        self.auto_rotate = True
        self.render_scale = 0.75
        self._last_count = 0
        self.fps_history = []
        self.status = ""

        self.camera = Camera()

        self.preset_key = start_preset
        self.model = ParameterModel(preset_parameters(start_preset))
        if overrides:
            self.model.update(**overrides)
        self.scene = Scene()
        self.field = GalaxyField(self.scene, self.model, source=make_source(seed))
        self.model.add_commit_listener(self.field.regenerate)

        # Control panel (built after pygame.init in run())
        self.panel = None
        self.sliders = {}
        self.swatches = {}
        self.preset_buttons = None

        self._frame = None
        self._frame_key = None

        # Initial galaxy
        self.model.commit()
        self._report_generation()

    @property
    def total_w(self):
        return self.canvas_w + (PANEL_WIDTH if self.panel_visible else 0)

    # ------------------------------------------------------------------
    # Parameter wiring
    # ------------------------------------------------------------------

    def _make_param_callback(self, key):
        """Live edit: validate and store, no regeneration."""
        def callback(val):
            if key in INTEGER_FIELDS:
                val = int(round(val))
            try:
                self.model.set(key, val)
            except ValidationError as e:
                self.status = str(e)
        return callback

    def _make_color_callback(self, key, channel):
        def callback(val):
            color = list(getattr(self.model.get(), key))
            color[channel] = val
            try:
                self.model.set(key, tuple(color))
            except ValidationError as e:
                self.status = str(e)
                return
            if key in self.swatches:
                self.swatches[key].color = to_rgb255(color)
        return callback

    def _commit(self, _value=None):
        """Commit the edited parameters; revert them if regeneration fails."""
        try:
            self.model.commit()
        except GalaxyFieldError as e:
            print(f"Regeneration failed: {e}")
            self.status = f"Rejected: {e}"
            self.model.revert()
            self._sync_sliders()
            return False
        self._report_generation()
        return True

    def _report_generation(self):
        count = self.field.points.count
        self.status = (f"{count:,} particles in "
                       f"{self.field.last_duration * 1000:.0f} ms")
        self.render_scale = render_scale_for(count)
        # Pause once when crossing into heavy territory; SPACE resumes
        if count > AUTO_ROTATE_LIMIT >= self._last_count and self.auto_rotate:
            self.auto_rotate = False
            self.status += "  (auto-rotate paused, SPACE resumes)"
        self._last_count = count

    def _apply_preset(self, key):
        if get_preset(key) is None:
            return
        self.model.replace(preset_parameters(key))
        if self._commit():
            self.preset_key = key
        self._sync_sliders()
        if self.preset_buttons and self.preset_key in PRESET_ORDER:
            self.preset_buttons.selected = PRESET_ORDER.index(self.preset_key)
            self.preset_buttons.update_active()

    def _on_preset_select(self, idx, name):
        if idx < len(PRESET_ORDER):
            self._apply_preset(PRESET_ORDER[idx])

    def _on_regenerate(self):
        self._commit()

    def _sync_sliders(self):
        params = self.model.get()
        for sdef in SLIDER_DEFS:
            if sdef["key"] in self.sliders:
                self.sliders[sdef["key"]].set_value(getattr(params, sdef["key"]))
        for key, _label in _COLOR_KEYS:
            color = getattr(params, key)
            for channel, name in enumerate(_CHANNELS):
                slider = self.sliders.get(f"{key}_{name}")
                if slider:
                    slider.set_value(color[channel])
            if key in self.swatches:
                self.swatches[key].color = to_rgb255(color)

    def _build_panel(self):
        panel = ControlPanel(self.canvas_w, 0, PANEL_WIDTH, self.canvas_h)
        self.sliders = {}
        self.swatches = {}
        params = self.model.get()

        panel.add_section("PRESETS")
        names = [PRESETS[k]["name"] for k in PRESET_ORDER]
        selected = PRESET_ORDER.index(self.preset_key) if self.preset_key in PRESET_ORDER else 0
        self.preset_buttons = panel.add_button_row(
            names, selected=selected, on_select=self._on_preset_select
        )

        section = None
        for sdef in SLIDER_DEFS:
            if sdef["section"] != section:
                section = sdef["section"]
                panel.add_section(section)
            self.sliders[sdef["key"]] = panel.add_slider(
                sdef["label"], sdef["min"], sdef["max"], getattr(params, sdef["key"]),
                fmt=sdef.get("fmt", ".3f"), step=sdef.get("step"),
                on_change=self._make_param_callback(sdef["key"]),
                on_release=self._commit,
            )

        panel.add_section("COLORS")
        for key, label in _COLOR_KEYS:
            color = getattr(params, key)
            self.swatches[key] = panel.add_swatch(label, to_rgb255(color))
            for channel, name in enumerate(_CHANNELS):
                self.sliders[f"{key}_{name}"] = panel.add_slider(
                    f"{label} {name}", 0.0, 1.0, color[channel], fmt=".2f",
                    on_change=self._make_color_callback(key, channel),
                    on_release=self._commit,
                )

        panel.add_spacer(4)
        panel.add_button("Regenerate  [R]", on_click=self._on_regenerate)
        panel.add_spacer(4)
        panel.add_button("Screenshot  [S]", on_click=lambda: self._save_screenshot())

        self.panel = panel

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_frame(self):
        """Render the scene at render_scale; cached while nothing changes."""
        w = max(16, int(self.canvas_w * self.render_scale))
        h = max(16, int(self.canvas_h * self.render_scale))
        key = (self.field.generation, self.camera.azimuth, w, h)
        if key != self._frame_key:
            rgb = render_scene(self.scene, self.camera, w, h)
            self._frame = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
            self._frame_key = key
        return self._frame

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return
        params = self.model.get()
        line = (f"{self.preset_key}  |  {params.count:,} pts  |  "
                f"{params.branches} arms  |  spin {params.spin:+.2f}  |  FPS: {fps:.0f}")
        if self.model.dirty:
            line += "  |  [uncommitted]"

        bg_surface = pygame.Surface((self.canvas_w, 44), pygame.SRCALPHA)
        bg_surface.fill((0, 0, 0, 140))
        screen.blit(bg_surface, (0, 0))
        screen.blit(self.hud_font.render(line, True, (210, 215, 225)), (10, 6))
        color = THEME["text_error"] if self.status.startswith("Rejected") else THEME["text_dim"]
        screen.blit(self.hud_font.render(self.status, True, color), (10, 24))

    def _save_screenshot(self):
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(screenshots_dir, f"galaxy_{self.preset_key}_{timestamp}.png")
        rgb = render_scene(self.scene, self.camera, self.canvas_w, self.canvas_h)
        surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        pygame.image.save(surface, path)
        print(f"Screenshot saved: {path}")

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.total_w, self.canvas_h))
        pygame.display.set_caption("Galaxy Generator")
        clock = pygame.time.Clock()

        self.hud_font = pygame.font.SysFont("menlo", 13)
        self.panel_font = pygame.font.SysFont("menlo", 12)

        self._build_panel()

        last_time = time.time()

        while self.running:
            now = time.time()
            dt = min(now - last_time, 0.1)
            last_time = now

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    continue

                if event.type == pygame.KEYDOWN:
                    screen = self._handle_keydown(event, screen)
                    continue

                if self.panel_visible and self.panel:
                    if event.type == pygame.MOUSEWHEEL:
                        self.panel.handle_wheel(event)
                        continue
                    if self.panel.handle_event(event):
                        continue

            if self.auto_rotate:
                self.camera.orbit(ROTATE_SPEED * dt)

            screen.fill(THEME["bg"])
            frame = self._render_frame()
            screen.blit(pygame.transform.smoothscale(frame, (self.canvas_w, self.canvas_h)), (0, 0))

            self.fps_history.append(max(time.time() - now, 1e-3))
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            self._draw_hud(screen, 1.0 / np.mean(self.fps_history))

            if self.panel_visible and self.panel:
                self.panel.x = self.canvas_w
                self.panel.draw(screen, self.panel_font)

            pygame.display.flip()
            clock.tick(60)

        self.field.close()
        pygame.quit()

    def _handle_keydown(self, event, screen):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.auto_rotate = not self.auto_rotate

        elif key == pygame.K_r:
            self._on_regenerate()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_TAB:
            self.panel_visible = not self.panel_visible
            screen = pygame.display.set_mode((self.total_w, self.canvas_h))

        elif key == pygame.K_s:
            self._save_screenshot()

        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER):
                self._apply_preset(PRESET_ORDER[idx])

        return screen
