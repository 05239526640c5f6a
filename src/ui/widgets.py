# src/ui/widgets.py
from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from kivy.uix.widget import Widget
from kivy.uix.image import Image
from kivy.uix.floatlayout import FloatLayout
from kivy.uix.label import Label

from kivy.metrics import dp
from kivy.clock import Clock
from kivy.animation import Animation
from kivy.logger import Logger

from kivy.graphics import Color, Rectangle, InstructionGroup, Line, Point, RoundedRectangle
from kivy.graphics.texture import Texture
from kivy.core.image import Image as CoreImage

from choreography.records import ParticleKind
from choreography.palette import PHOTO_FRAME
from ui.projection import project, projected_size


# -----------------------------------------------------------------------------
# Root container
# -----------------------------------------------------------------------------
class RootView(FloatLayout):
    """Top-level Kivy container used by KV."""
    pass


# -----------------------------------------------------------------------------
# VideoFeed: small mirrored camera preview in the corner
# -----------------------------------------------------------------------------
class VideoFeed(Image):
    """Translucent preview of what the hand tracker sees, mirrored like a mirror."""
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._texture = None
        self._border = InstructionGroup()
        self.canvas.after.add(self._border)
        self.bind(pos=self._redraw_border, size=self._redraw_border)

    def _redraw_border(self, *args):
        self._border.clear()
        self._border.add(Color(1, 1, 1, 0.18))
        self._border.add(Line(
            rounded_rectangle=(self.x, self.y, self.width, self.height, dp(8)),
            width=dp(1.0))
        )

    def set_frame(self, rgb_frame: np.ndarray):
        """Accepts an RGB numpy array and uploads it, mirrored, to a texture."""
        if rgb_frame is None or getattr(rgb_frame, "ndim", 0) != 3:
            return
        h, w = rgb_frame.shape[:2]
        if h <= 1 or w <= 1:
            return

        if (self._texture is None) or (self._texture.size != (w, h)):
            tex = Texture.create(size=(w, h))
            tex.flip_vertical()
            tex.flip_horizontal()
            self._texture = tex

        self._texture.blit_buffer(np.ascontiguousarray(rgb_frame).tobytes(),
                                  colorfmt="rgb", bufferfmt="ubyte")
        self.texture = self._texture
        self.canvas.ask_update()


# -----------------------------------------------------------------------------
# GestureHUD: current gesture + mode badge, fades out when the hand is gone
# -----------------------------------------------------------------------------
GESTURE_META: Dict[str, Dict[str, object]] = {
    "FIST": {"icon": "✊", "label": "Tree", "rgb_f": (0.30, 0.85, 0.45)},
    "OPEN": {"icon": "✋", "label": "Scatter", "rgb_f": (0.98, 0.80, 0.25)},
    "PINCH": {"icon": "🤏", "label": "Inspect", "rgb_f": (0.95, 0.35, 0.35)},
    "NONE": {"icon": "…", "label": "Looking for a gesture", "rgb_f": (0.55, 0.55, 0.55)},
}


class GestureHUD(Widget):
    """
    Badge showing the gesture seen in the latest frame and the active mode.
    Fades after FADE_DELAY seconds without a detected hand. A load error for
    the hand detector is shown as a banner that stays up.
    Call from the UI thread only.
    """

    FADE_DELAY = 1.8
    BADGE_H = 38
    BADGE_PAD_X = 12

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._gesture = "NONE"
        self._mode = "TREE"
        self._error: Optional[str] = None
        self._fade_event = None

        self._g = InstructionGroup()
        self.canvas.add(self._g)

        self.opacity = 0.0
        self.bind(pos=self._redraw, size=self._redraw)

    def update_status(self, gesture: str, mode: str, detected: bool):
        changed = (gesture, mode) != (self._gesture, self._mode)
        self._gesture, self._mode = gesture, mode

        if self._fade_event:
            self._fade_event.cancel()
            self._fade_event = None

        if detected or self._error:
            Animation.cancel_all(self, "opacity")
            self.opacity = 1.0
            if changed:
                self._redraw()
            if not self._error:
                self._fade_event = Clock.schedule_once(self._start_fade, self.FADE_DELAY)
        elif changed:
            self._redraw()

    def show_error(self, message: str):
        self._error = message
        Animation.cancel_all(self, "opacity")
        self.opacity = 1.0
        self._redraw()

    def _start_fade(self, *args):
        Animation(opacity=0.0, duration=0.5, t="out_quad").start(self)

    def _redraw(self, *args):
        self._g.clear()
        for child in list(self.children):
            self.remove_widget(child)

        x0, W = self.x, self.width
        row_h = dp(self.BADGE_H)
        top = self.y + self.height

        meta = GESTURE_META.get(self._gesture, GESTURE_META["NONE"])
        r, g_c, b = meta["rgb_f"]

        self._g.add(Color(0.09, 0.10, 0.13, 0.85))
        self._g.add(RoundedRectangle(pos=(x0, top - row_h), size=(W, row_h), radius=[dp(10)] * 4))
        self._g.add(Color(r, g_c, b, 0.90))
        self._g.add(RoundedRectangle(pos=(x0, top - row_h), size=(dp(4), row_h), radius=[dp(3)] * 4))

        lbl = Label(
            text=f"[b]{meta['icon']}[/b]  [color={int(r*255):02x}{int(g_c*255):02x}{int(b*255):02x}ff]"
                 f"{meta['label']}[/color]  [color=8890a0ff]mode: {self._mode}[/color]",
            markup=True,
            font_size=dp(15),
            halign="left",
            valign="middle",
            size=(W - dp(self.BADGE_PAD_X) * 2, row_h),
            pos=(x0 + dp(self.BADGE_PAD_X), top - row_h),
        )
        lbl.text_size = lbl.size
        self.add_widget(lbl)

        if self._error:
            err_y = top - row_h * 2 - dp(6)
            self._g.add(Color(0.80, 0.15, 0.15, 0.90))
            self._g.add(RoundedRectangle(pos=(x0, err_y), size=(W, row_h), radius=[dp(8)] * 4))
            err = Label(
                text=self._error,
                font_size=dp(13),
                halign="left",
                valign="middle",
                size=(W - dp(self.BADGE_PAD_X) * 2, row_h),
                pos=(x0 + dp(self.BADGE_PAD_X), err_y),
            )
            err.text_size = err.size
            self.add_widget(err)


# -----------------------------------------------------------------------------
# StageView: the FrameSink that draws the choreography
# -----------------------------------------------------------------------------
COLOR_LEVELS = 6
MAX_POINTS_PER_INSTRUCTION = 8000   # Kivy caps a single Point at 2**15 - 2 floats
POINT_SIZE = {ParticleKind.FOLIAGE: 1.4, ParticleKind.RIBBON: 2.0}
BACKGROUND = (0.0, 0.008, 0.0, 1.0)


def tone_map(colors: np.ndarray) -> np.ndarray:
    """HDR glow colors -> displayable [0, 1) RGB."""
    c = np.maximum(np.asarray(colors, dtype=np.float64), 0.0)
    return c / (1.0 + c)


def color_buckets(colors: np.ndarray, levels: int = COLOR_LEVELS):
    """Group rows of similar display color; returns [(rgb, indices), ...]."""
    display = tone_map(colors)
    if len(display) == 0:
        return []
    q = np.rint(display * (levels - 1)).astype(np.int64)
    keys = (q[:, 0] * levels + q[:, 1]) * levels + q[:, 2]
    uniq, inverse = np.unique(keys, return_inverse=True)
    out = []
    for b in range(len(uniq)):
        idx = np.nonzero(inverse.ravel() == b)[0]
        out.append((tuple(display[idx].mean(axis=0)), idx))
    return out


class _PointLayer:
    def __init__(self, kind: ParticleKind):
        self.kind = kind
        self.group = InstructionGroup()
        self.buckets: List = []     # [(indices, [Point, ...]), ...]

    def rebuild(self, colors: np.ndarray):
        self.group.clear()
        self.buckets = []
        size = dp(POINT_SIZE.get(self.kind, 1.5))
        for rgb, idx in color_buckets(colors):
            self.group.add(Color(*rgb, 1.0))
            chunks = []
            for _ in range(math.ceil(len(idx) / MAX_POINTS_PER_INSTRUCTION)):
                p = Point(points=[], pointsize=size)
                self.group.add(p)
                chunks.append(p)
            self.buckets.append((idx, chunks))

    def draw(self, screen: np.ndarray, visible: np.ndarray):
        for idx, chunks in self.buckets:
            sel = idx[visible[idx]]
            coords = screen[sel]
            for k, p in enumerate(chunks):
                part = coords[k * MAX_POINTS_PER_INSTRUCTION:(k + 1) * MAX_POINTS_PER_INSTRUCTION]
                p.points = part.ravel().tolist()


class StageView(Widget):
    """Projects particle fields onto the widget canvas (implements FrameSink)."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.image_refs: List[str] = []
        self._textures: Dict[str, object] = {}
        self._layers = {
            ParticleKind.FOLIAGE: _PointLayer(ParticleKind.FOLIAGE),
            ParticleKind.RIBBON: _PointLayer(ParticleKind.RIBBON),
        }
        self._photos = InstructionGroup()
        self._photo_rects: List = []
        self._photo_order: Optional[tuple] = None

        with self.canvas.before:
            Color(*BACKGROUND)
            self._bg = Rectangle(pos=self.pos, size=self.size)
        for layer in self._layers.values():
            self.canvas.add(layer.group)
        self.canvas.add(self._photos)
        self.bind(pos=self._sync_bg, size=self._sync_bg)

    def _sync_bg(self, *args):
        self._bg.pos = self.pos
        self._bg.size = self.size

    def set_photos(self, image_refs: Sequence[str]):
        self.image_refs = list(image_refs)

    def _texture_for(self, ref: str):
        if ref not in self._textures:
            try:
                self._textures[ref] = CoreImage(ref).texture
            except Exception as e:
                Logger.warning(f"StageView: could not load photo '{ref}': {e}")
                self._textures[ref] = None
        return self._textures[ref]

    # ---- FrameSink ----
    def render(self, frames, camera, mode):
        if self.width <= 1 or self.height <= 1:
            return
        rotation = (camera.rotation_x, camera.rotation_y)
        for frame in frames:
            if frame.kind is ParticleKind.PHOTO:
                self._draw_photos(frame, rotation)
                continue
            layer = self._layers[frame.kind]
            if frame.colors is not None:
                layer.rebuild(frame.colors)
            screen, _depth, visible = project(frame.positions, rotation, self.size)
            screen += np.asarray(self.pos, dtype=np.float64)
            layer.draw(screen, visible)

    def _rebuild_photos(self, count: int, focused: Optional[int]):
        self._photos.clear()
        self._photo_rects = [None] * count
        order = [i for i in range(count) if i != focused]
        if focused is not None and focused < count:
            order.append(focused)
        for i in order:
            ref = self.image_refs[i] if i < len(self.image_refs) else None
            frame_color = Color(*PHOTO_FRAME, 1.0)
            frame_rect = Rectangle()
            img_color = Color(1, 1, 1, 1)
            img_rect = Rectangle(texture=self._texture_for(ref) if ref else None)
            for instr in (frame_color, frame_rect, img_color, img_rect):
                self._photos.add(instr)
            self._photo_rects[i] = (frame_color, frame_rect, img_color, img_rect)
        self._photo_order = (count, focused)

    def _draw_photos(self, frame, rotation):
        n = len(frame)
        if frame.colors is not None or self._photo_order != (n, frame.focused):
            self._rebuild_photos(n, frame.focused)
        if n == 0:
            return

        screen, depth, visible = project(frame.positions, rotation, self.size)
        screen += np.asarray(self.pos, dtype=np.float64)
        sizes = projected_size(frame.scales[:, :2], depth[:, None], self.height)
        # cards turned away from the viewer get narrower
        yaw = 2.0 * np.arctan2(frame.rotations[:, 1], frame.rotations[:, 3]) + rotation[1]
        sizes[:, 0] *= np.maximum(np.abs(np.cos(yaw)), 0.15)

        for i, (frame_color, frame_rect, img_color, img_rect) in enumerate(self._photo_rects):
            alpha = 1.0 if visible[i] else 0.0
            frame_color.a = alpha
            img_color.a = alpha
            w, h = sizes[i]
            cx, cy = screen[i]
            pad = 0.05 * max(w, h)
            frame_rect.pos = (cx - w / 2 - pad, cy - h / 2 - pad)
            frame_rect.size = (w + 2 * pad, h + 2 * pad)
            img_rect.pos = (cx - w / 2, cy - h / 2)
            img_rect.size = (w, h)
