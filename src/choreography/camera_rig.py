# src/choreography/camera_rig.py
from __future__ import annotations

from typing import NamedTuple, Tuple

from choreography.motion import damp_factor
from gestures.modes import Mode

PARALLAX_RATE = 2.0
PARALLAX_GAIN = 1.0
AUTO_SPIN = 0.1       # rad/s around the vertical axis in TREE mode


class CameraPose(NamedTuple):
    rotation_x: float
    rotation_y: float


class CameraRig:
    """
    Rotation applied to the whole scene.

    SCATTER: the hand pointer tilts the scene (parallax).
    TREE: slow spin around the trunk, tilt eases back to level.
    INSPECT: frozen so the focused photo stays put.
    """

    def __init__(self):
        self.rotation_x = 0.0
        self.rotation_y = 0.0

    @property
    def pose(self) -> CameraPose:
        return CameraPose(self.rotation_x, self.rotation_y)

    def update(self, mode: Mode, pointer: Tuple[float, float], dt: float) -> CameraPose:
        f = damp_factor(PARALLAX_RATE, dt)
        if mode is Mode.SCATTER:
            target_x = (pointer[1] - 0.5) * PARALLAX_GAIN
            target_y = (pointer[0] - 0.5) * PARALLAX_GAIN
            self.rotation_x += (target_x - self.rotation_x) * f
            self.rotation_y += (target_y - self.rotation_y) * f
        elif mode is Mode.TREE:
            self.rotation_y += max(dt, 0.0) * AUTO_SPIN
            self.rotation_x += (0.0 - self.rotation_x) * f
        return self.pose
