# src/ui/projection.py
"""Perspective projection for the stage: world (x, y, z) -> widget pixels."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

CAMERA_POSITION = (0.0, 2.0, 38.0)
CAMERA_FOV_DEG = 45.0
NEAR_PLANE = 0.1


def rotation_matrix(rx: float, ry: float) -> np.ndarray:
    """Scene rotation, X then Y (Euler XYZ with z = 0)."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float64)
    rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float64)
    return rot_x @ rot_y


def _focal(viewport_h: float, fov_deg: float) -> float:
    return (viewport_h / 2.0) / math.tan(math.radians(fov_deg) / 2.0)


def project(points, rotation: Tuple[float, float], viewport: Tuple[float, float],
            fov_deg: float = CAMERA_FOV_DEG, camera=CAMERA_POSITION):
    """
    Args:
        points: (N, 3) world positions.
        rotation: (rx, ry) scene rotation.
        viewport: (width, height) in pixels, origin bottom-left (Kivy).

    Returns:
        screen (N, 2) pixel coords, depth (N,) distance along the view axis,
        visible (N,) bool mask of points in front of the near plane.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    w, h = viewport
    view = pts @ rotation_matrix(*rotation).T - np.asarray(camera, dtype=np.float64)
    depth = -view[:, 2]
    visible = depth > NEAR_PLANE
    safe = np.where(visible, depth, 1.0)
    f = _focal(h, fov_deg)
    screen = np.empty((len(pts), 2))
    screen[:, 0] = w / 2.0 + view[:, 0] / safe * f
    screen[:, 1] = h / 2.0 + view[:, 1] / safe * f
    return screen, depth, visible


def projected_size(world_size, depth, viewport_h: float, fov_deg: float = CAMERA_FOV_DEG):
    """Pixel length of a world-space length seen at `depth`."""
    depth = np.maximum(np.asarray(depth, dtype=np.float64), NEAR_PLANE)
    return np.asarray(world_size, dtype=np.float64) / depth * _focal(viewport_h, fov_deg)
