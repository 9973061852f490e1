"""
Parameter Panel Widgets

Dark-themed pygame widgets for the galaxy viewer's side panel.

Every slider edit is two-phase, mirroring ParameterModel:
  - on_change(value) fires on each drag step (cheap: model.set)
  - on_release(value) fires once when the drag ends (model.commit)
Between the two the slider shows its value in the accent color, so an
uncommitted edit is visible at a glance.

The panel stacks widgets top to bottom and scrolls with the mouse wheel
when they no longer fit.
"""

import pygame


THEME = {
    "bg": (0, 0, 0),
    "panel": (14, 14, 22),
    "track": (44, 46, 64),
    "accent": (255, 96, 48),
    "knob": (205, 212, 232),
    "knob_hot": (255, 255, 255),
    "text": (176, 182, 198),
    "text_bright": (232, 236, 248),
    "text_dim": (96, 102, 124),
    "text_error": (255, 110, 110),
    "button": (34, 38, 58),
    "button_hover": (50, 56, 84),
    "button_on": (27, 57, 132),
    "divider": (36, 38, 56),
}

PAD = 8


class Widget:
    """Something the panel stacks: a rect, drawing, optional input."""

    height = 24

    def __init__(self, y, width):
        self.rect = pygame.Rect(0, y, width, self.height)

    def handle_event(self, event):
        return False

    def release(self):
        return False

    def draw(self, surface, font):
        raise NotImplementedError


class Slider(Widget):
    """Labelled horizontal slider with a live phase and a commit phase."""

    height = 36

    def __init__(self, y, width, label, min_val, max_val, value,
                 fmt=".3f", step=None, on_change=None, on_release=None):
        super().__init__(y, width)
        self.label = label
        self.min_val = min_val
        self.max_val = max_val
        self.fmt = fmt
        self.step = step
        self.on_change = on_change
        self.on_release = on_release
        self.value = self._clamp(value)
        self.dragging = False
        self.pending = False
        self.hovered = False

    @property
    def track(self):
        return pygame.Rect(self.rect.x + PAD, self.rect.y + 20, self.rect.width - 2 * PAD, 4)

    def _clamp(self, val):
        return min(self.max_val, max(self.min_val, val))

    def _fraction(self):
        span = self.max_val - self.min_val
        return 0.0 if span <= 0 else (self.value - self.min_val) / span

    def _knob_x(self):
        track = self.track
        return track.x + self._fraction() * track.width

    def _value_at(self, px):
        track = self.track
        frac = min(1.0, max(0.0, (px - track.x) / track.width))
        val = self.min_val + frac * (self.max_val - self.min_val)
        if self.step:
            val = self.min_val + round((val - self.min_val) / self.step) * self.step
        return self._clamp(val)

    def _drag_to(self, px):
        val = self._value_at(px)
        if val == self.value:
            return
        self.value = val
        self.pending = True
        if self.on_change:
            self.on_change(val)

    def release(self):
        """Finish a drag. Commits only if the drag actually moved the value."""
        if not self.dragging:
            return False
        self.dragging = False
        if self.pending:
            self.pending = False
            if self.on_release:
                self.on_release(self.value)
        return True

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.track.inflate(8, 24).collidepoint(event.pos):
                self.dragging = True
                self._drag_to(event.pos[0])
                return True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            return self.release()
        elif event.type == pygame.MOUSEMOTION:
            mx, my = event.pos
            self.hovered = abs(mx - self._knob_x()) < 12 and abs(my - self.track.centery) < 12
            if self.dragging:
                self._drag_to(mx)
                return True
        return False

    def set_value(self, val):
        """Move the knob without firing callbacks (model -> widget sync)."""
        self.value = self._clamp(val)
        self.pending = False

    def draw(self, surface, font):
        x, y, w = self.rect.x, self.rect.y, self.rect.width
        surface.blit(font.render(self.label, True, THEME["text"]), (x + PAD, y + 2))
        value_color = THEME["accent"] if self.pending else THEME["text_bright"]
        text = font.render(f"{self.value:{self.fmt}}", True, value_color)
        surface.blit(text, (x + w - text.get_width() - PAD, y + 2))

        track = self.track
        knob_x = int(self._knob_x())
        pygame.draw.rect(surface, THEME["track"], track, border_radius=2)
        filled = pygame.Rect(track.x, track.y, knob_x - track.x, track.height)
        pygame.draw.rect(surface, THEME["accent"], filled, border_radius=2)

        hot = self.dragging or self.hovered
        pygame.draw.circle(surface, THEME["knob_hot"] if hot else THEME["knob"],
                           (knob_x, track.centery), 9 if self.dragging else 7)


class Button(Widget):
    def __init__(self, x, y, width, height, label, on_click=None):
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.on_click = on_click
        self.active = False
        self.hovered = False

    def handle_event(self, event):
        if event.type == pygame.MOUSEMOTION:
            self.hovered = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                if self.on_click:
                    self.on_click()
                return True
        return False

    def draw(self, surface, font):
        if self.active:
            fill = THEME["button_on"]
        else:
            fill = THEME["button_hover"] if self.hovered else THEME["button"]
        pygame.draw.rect(surface, fill, self.rect, border_radius=4)
        text = font.render(self.label, True, THEME["text_bright"])
        surface.blit(text, text.get_rect(center=self.rect.center))


class ButtonRow(Widget):
    """Radio-style buttons laid out left to right, wrapping to new lines."""

    def __init__(self, y, width, labels, selected=0, on_select=None, btn_height=24):
        self.labels = list(labels)
        self.selected = selected
        self.on_select = on_select
        self.buttons = []

        x, row_y = PAD, y
        for i, label in enumerate(self.labels):
            bw = max(7 * len(label) + 18, 48)
            if x + bw > width - PAD and x > PAD:
                x, row_y = PAD, row_y + btn_height + 4
            self.buttons.append(Button(x, row_y, bw, btn_height, label,
                                       on_click=lambda i=i: self._pick(i)))
            x += bw + 4

        self.rect = pygame.Rect(0, y, width, row_y - y + btn_height)
        self.height = self.rect.height
        self.update_active()

    def _pick(self, index):
        self.selected = index
        self.update_active()
        if self.on_select:
            self.on_select(index, self.labels[index])

    def update_active(self):
        for i, btn in enumerate(self.buttons):
            btn.active = i == self.selected

    def handle_event(self, event):
        return any([btn.handle_event(event) for btn in self.buttons])

    def draw(self, surface, font):
        for btn in self.buttons:
            btn.draw(surface, font)


class ColorSwatch(Widget):
    """Label, hex readout and a filled chip for an (r, g, b) 0-255 color."""

    height = 22

    def __init__(self, y, width, label, color):
        super().__init__(y, width)
        self.label = label
        self.color = color

    def draw(self, surface, font):
        x, y, w = self.rect.x, self.rect.y, self.rect.width
        surface.blit(font.render(self.label, True, THEME["text"]), (x + PAD, y + 3))
        r, g, b = self.color
        hex_text = font.render(f"#{r:02x}{g:02x}{b:02x}", True, THEME["text_dim"])
        chip = pygame.Rect(x + w - 48 - PAD, y + 3, 48, 16)
        surface.blit(hex_text, (chip.x - hex_text.get_width() - 6, y + 3))
        pygame.draw.rect(surface, self.color, chip, border_radius=3)


class SectionHeader(Widget):
    height = 24

    def __init__(self, y, width, title):
        super().__init__(y, width)
        self.title = title

    def draw(self, surface, font):
        x, y, w = self.rect.x, self.rect.y, self.rect.width
        pygame.draw.line(surface, THEME["divider"], (x + PAD, y + 6), (x + w - PAD, y + 6))
        surface.blit(font.render(self.title, True, THEME["text_dim"]), (x + PAD, y + 10))


class ControlPanel:
    """Vertical stack of widgets drawn at (x, y) on the window."""

    def __init__(self, x, y, width, height):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.widgets = []
        self.scroll = 0
        self._bottom = PAD

    def _stack(self, widget, gap=4):
        self.widgets.append(widget)
        self._bottom += widget.height + gap
        return widget

    def add_section(self, title):
        return self._stack(SectionHeader(self._bottom, self.width, title))

    def add_slider(self, label, min_val, max_val, value, fmt=".3f",
                   step=None, on_change=None, on_release=None):
        return self._stack(Slider(self._bottom, self.width, label, min_val, max_val, value,
                                  fmt=fmt, step=step, on_change=on_change,
                                  on_release=on_release), gap=6)

    def add_swatch(self, label, color):
        return self._stack(ColorSwatch(self._bottom, self.width, label, color))

    def add_button_row(self, labels, selected=0, on_select=None):
        return self._stack(ButtonRow(self._bottom, self.width, labels, selected, on_select),
                           gap=8)

    def add_button(self, label, on_click=None):
        return self._stack(Button(PAD, self._bottom, self.width - 2 * PAD, 28, label,
                                  on_click), gap=8)

    def add_spacer(self, height=8):
        self._bottom += height

    def _max_scroll(self):
        return max(0, self._bottom - self.height)

    def release_all(self):
        """End any drag in progress (commits it)."""
        return any([w.release() for w in self.widgets])

    def handle_event(self, event):
        """Route a window-space event to the widgets. True if consumed."""
        if not hasattr(event, "pos"):
            return False
        lx = event.pos[0] - self.x
        ly = event.pos[1] - self.y
        inside = 0 <= lx <= self.width and 0 <= ly <= self.height

        if event.type == pygame.MOUSEBUTTONUP and not inside:
            # Drag let go over the canvas
            self.release_all()
            return False
        if not inside:
            return False

        local = pygame.event.Event(event.type, {**event.__dict__, "pos": (lx, ly + self.scroll)})
        for widget in self.widgets:
            if widget.handle_event(local):
                return True
        return False

    def handle_wheel(self, event):
        """Scroll on MOUSEWHEEL while the pointer is over the panel."""
        mx, _my = pygame.mouse.get_pos()
        if not 0 <= mx - self.x <= self.width:
            return False
        self.scroll = min(self._max_scroll(), max(0, self.scroll - event.y * 24))
        return True

    def draw(self, target, font):
        surface = pygame.Surface((self.width, self.height))
        surface.fill(THEME["panel"])
        content = pygame.Surface((self.width, max(self.height, self._bottom)))
        content.fill(THEME["panel"])
        for widget in self.widgets:
            widget.draw(content, font)
        surface.blit(content, (0, -self.scroll))
        pygame.draw.line(surface, THEME["divider"], (0, 0), (0, self.height))
        target.blit(surface, (self.x, self.y))
