# src/choreography/scene.py
"""
Choreography: the per-frame engine tying gestures to particle fields.

    hand state -> ModeController -> Mode -> every field -> FrameSink
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

import numpy as np
from kivy.logger import Logger

from choreography.camera_rig import CameraPose, CameraRig
from choreography.field import FieldFrame, PhotoField, make_foliage_field, make_ribbon_field
from gestures.hand_state import HandState
from gestures.modes import Mode, ModeController

FOLIAGE_COUNT = 6000
RIBBON_COUNT = 2000


class FrameSink(Protocol):
    def render(self, frames: Sequence[FieldFrame], camera: CameraPose, mode: Mode) -> None: ...


class NullSink:
    """Discards frames but remembers the last one (handy in tests)."""

    def __init__(self):
        self.frames: List[FieldFrame] = []
        self.camera: Optional[CameraPose] = None
        self.mode: Optional[Mode] = None
        self.count = 0

    def render(self, frames, camera, mode):
        self.frames = list(frames)
        self.camera = camera
        self.mode = mode
        self.count += 1


class Choreography:
    def __init__(self, foliage_count: int = FOLIAGE_COUNT, ribbon_count: int = RIBBON_COUNT,
                 sink: Optional[FrameSink] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.foliage = make_foliage_field(foliage_count, self.rng)
        self.ribbons = make_ribbon_field(ribbon_count, self.rng)
        self.photos = PhotoField(rng=self.rng)
        self.modes = ModeController(self.photos, rng=self.rng)
        self.camera = CameraRig()
        self.sink = sink if sink is not None else NullSink()
        self.hand = HandState.absent()
        self.elapsed = 0.0
        Logger.info(
            f"Choreography: {foliage_count} foliage, {ribbon_count} ribbon particles."
        )

    @property
    def mode(self) -> Mode:
        return self.modes.mode

    @property
    def fields(self):
        return (self.foliage, self.ribbons, self.photos)

    def handle(self, state: HandState) -> Mode:
        """Apply one tracking result; NONE keeps the current mode."""
        self.hand = state
        return self.modes.update(state.gesture)

    def add_photos(self, image_refs: Sequence[str]) -> int:
        return self.photos.append(image_refs)

    def tick(self, dt: float) -> List[FieldFrame]:
        dt = max(float(dt), 0.0)
        self.elapsed += dt
        mode = self.mode
        frames = [f.update(mode, self.elapsed, dt) for f in self.fields]
        pose = self.camera.update(mode, self.hand.pointer, dt)
        self.sink.render(frames, pose, mode)
        return frames
