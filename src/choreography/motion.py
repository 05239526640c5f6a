# src/choreography/motion.py
"""
Shared math: damped approach toward a target and quaternion helpers.

Quaternions are stored as (x, y, z, w) rows.
"""

from __future__ import annotations

import numpy as np


def damp_factor(rate: float, dt: float) -> float:
    """
    Fraction of the remaining distance to cover this tick.
    Always in [0, 1), so a damped value can never pass its target.
    """
    if dt <= 0.0 or rate <= 0.0:
        return 0.0
    return float(1.0 - np.exp(-rate * dt))


def damp(current, target, rate: float, dt: float, out=None):
    """Move `current` toward `target`; in place when out is given."""
    f = damp_factor(rate, dt)
    current = np.asarray(current, dtype=np.float64)
    step = (np.asarray(target, dtype=np.float64) - current) * f
    if out is None:
        return current + step
    np.add(current, step, out=out)
    return out


def identity_quats(count: int) -> np.ndarray:
    q = np.zeros((count, 4))
    q[:, 3] = 1.0
    return q


def quat_from_yaw(yaw) -> np.ndarray:
    """Rotation about +Y, vectorized over `yaw`."""
    half = np.asarray(yaw, dtype=np.float64) * 0.5
    q = np.zeros(half.shape + (4,))
    q[..., 1] = np.sin(half)
    q[..., 3] = np.cos(half)
    return q


def yaw_facing(direction) -> np.ndarray:
    """Yaw that turns +Z toward `direction` (..., 3), ignoring its y part."""
    d = np.asarray(direction, dtype=np.float64)
    return np.arctan2(d[..., 0], d[..., 2])


def quat_from_euler(x: float, y: float, z: float) -> np.ndarray:
    """Intrinsic XYZ Euler angles to a quaternion."""
    c1, c2, c3 = np.cos(x / 2), np.cos(y / 2), np.cos(z / 2)
    s1, s2, s3 = np.sin(x / 2), np.sin(y / 2), np.sin(z / 2)
    return np.array([
        s1 * c2 * c3 + c1 * s2 * s3,
        c1 * s2 * c3 - s1 * c2 * s3,
        c1 * c2 * s3 + s1 * s2 * c3,
        c1 * c2 * c3 - s1 * s2 * s3,
    ])


def nlerp_quats(current: np.ndarray, target: np.ndarray, f: float) -> np.ndarray:
    """Normalized lerp along the shorter arc, row-wise."""
    target = np.where((np.sum(current * target, axis=-1) < 0.0)[..., None], -target, target)
    q = current + (target - current) * f
    norm = np.linalg.norm(q, axis=-1, keepdims=True)
    norm[norm == 0.0] = 1.0
    return q / norm
