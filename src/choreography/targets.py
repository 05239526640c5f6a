# src/choreography/targets.py
"""
Pure target poses per particle kind and mode.

compute_targets() never touches field state: given the immutable layout,
the mode and the elapsed time it returns where every record *wants* to be.
The field then eases its current pose toward that target.
"""

from __future__ import annotations

from typing import Callable, Dict, NamedTuple, Optional

import numpy as np

from choreography.motion import identity_quats, quat_from_euler, quat_from_yaw, yaw_facing
from choreography.records import FieldLayout, ParticleKind
from gestures.modes import Mode

INSPECT_RECEDE = 2.0

FOLIAGE_SWAY = 0.05
FOLIAGE_BOB = 0.5

RIBBON_FLOW = 1.0
RIBBON_WIDTH = 0.1

PHOTO_ORBIT = 0.2
PHOTO_BOB = 0.5
PHOTO_SCALE_TREE = (2.0, 2.0, 1.0)
PHOTO_SCALE_SCATTER = (1.5, 1.5, 1.0)
PHOTO_SCALE_FOCUS = (6.0, 6.0, 1.0)
READING_POSITION = (0.0, 0.0, 15.0)


class Pose(NamedTuple):
    positions: np.ndarray    # (N, 3)
    rotations: np.ndarray    # (N, 4) xyzw
    scales: np.ndarray       # (N, 3)


def _receded(layout: FieldLayout) -> np.ndarray:
    return layout.scatter * INSPECT_RECEDE


def _facing_axis(positions: np.ndarray) -> np.ndarray:
    """Turn each record toward the vertical axis at its own height."""
    return quat_from_yaw(yaw_facing(-positions))


def foliage_pose(mode: Mode, layout: FieldLayout, time: float, focused: Optional[int] = None) -> Pose:
    n = len(layout)
    if mode is Mode.TREE:
        pos = layout.tree.copy()
        pos[:, 0] += np.sin(time * 0.5 + layout.tree[:, 1]) * FOLIAGE_SWAY
    elif mode is Mode.SCATTER:
        pos = layout.scatter.copy()
        pos[:, 1] += np.sin(time * 0.5 + layout.phase) * FOLIAGE_BOB
    else:
        pos = _receded(layout)
    scales = np.repeat(layout.size[:, None], 3, axis=1)
    return Pose(pos, identity_quats(n), scales)


def ribbon_pose(mode: Mode, layout: FieldLayout, time: float, focused: Optional[int] = None) -> Pose:
    n = len(layout)
    scales = np.full((n, 3), RIBBON_WIDTH)

    if mode is Mode.TREE:
        active = layout.angle - time * RIBBON_FLOW
        pos = np.stack([np.cos(active) * layout.radius, layout.height, np.sin(active) * layout.radius], axis=1)
        tangent = np.stack([-np.sin(active), np.zeros(n), np.cos(active)], axis=1)
        rot = quat_from_yaw(yaw_facing(tangent))
        scales[:, 2] = layout.trail
        return Pose(pos, rot, scales)

    if mode is Mode.SCATTER:
        pos = layout.scatter.copy()
        pos[:, 1] += np.sin(time + layout.phase)
    else:
        pos = _receded(layout)
    tumble = quat_from_euler(time * 0.5, time * 0.3, 0.0)
    return Pose(pos, np.tile(tumble, (n, 1)), scales)


def photo_pose(mode: Mode, layout: FieldLayout, time: float, focused: Optional[int] = None) -> Pose:
    n = len(layout)
    ids = np.arange(n, dtype=np.float64)

    if mode is Mode.TREE:
        angle = time * PHOTO_ORBIT + ids
        r = np.hypot(layout.tree[:, 0], layout.tree[:, 2])
        pos = np.stack([np.cos(angle) * r, layout.tree[:, 1], np.sin(angle) * r], axis=1)
        return Pose(pos, _facing_axis(pos), np.tile(PHOTO_SCALE_TREE, (n, 1)))

    if mode is Mode.SCATTER:
        pos = layout.scatter.copy()
        pos[:, 0] += np.sin(time * 0.5 + layout.phase) * PHOTO_BOB
        pos[:, 1] += np.cos(time * 0.3 + layout.phase) * PHOTO_BOB
        return Pose(pos, identity_quats(n), np.tile(PHOTO_SCALE_SCATTER, (n, 1)))

    pos = _receded(layout)
    rot = _facing_axis(pos)
    scales = np.tile(PHOTO_SCALE_TREE, (n, 1))
    if focused is not None and 0 <= focused < n:
        pos[focused] = READING_POSITION
        rot[focused] = (0.0, 0.0, 0.0, 1.0)
        scales[focused] = PHOTO_SCALE_FOCUS
    return Pose(pos, rot, scales)


_POSES: Dict[ParticleKind, Callable[..., Pose]] = {
    ParticleKind.FOLIAGE: foliage_pose,
    ParticleKind.RIBBON: ribbon_pose,
    ParticleKind.PHOTO: photo_pose,
}


def compute_targets(kind: ParticleKind, mode: Mode, layout: FieldLayout, time: float,
                    focused: Optional[int] = None) -> Pose:
    return _POSES[kind](mode, layout, time, focused)
