# src/choreography/layout.py
"""
Canonical target positions, computed once per particle at creation.

Tree placement fills a cone from the apex (index 0) down to the base. Each
index advances by the golden angle so the spiral never repeats, and the
in-disk radius is drawn as u ** RADIAL_BIAS, which pushes points toward the
cone's surface.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Optional, Tuple

import numpy as np

TREE_HEIGHT = 18.0
TREE_RADIUS = 7.5
GOLDEN_ANGLE = 2.39996
RADIAL_BIAS = 0.4

SCATTER_EXTENT = (50.0, 30.0, 34.0)   # x, y, z spans, centred on the origin

RIBBON_TURNS = 6.0
RIBBON_OFFSET = 0.6       # distance outside the cone surface
RIBBON_SPREAD = 1.5

PHOTO_SLOTS = 1000
PHOTO_SLOT_STRIDE = 10
PHOTO_SPREAD = 1.3


def _rng(rng):
    return rng if rng is not None else np.random.default_rng()


class TreePlacement(NamedTuple):
    position: Tuple[float, float, float]
    angle: float
    radius: float
    radius_at_height: float
    height_fraction: float     # 1.0 at the apex, 0.0 at the base


class RibbonLayout(NamedTuple):
    tree: np.ndarray           # (N, 3)
    angle: np.ndarray          # (N,)
    radius: np.ndarray         # (N,)
    height: np.ndarray         # (N,)
    trail: np.ndarray          # (N,)
    is_red: np.ndarray         # (N,) bool


def _cone(index, total):
    y = TREE_HEIGHT / 2.0 - (index / total) * TREE_HEIGHT
    radius_at_height = (TREE_HEIGHT / 2.0 - y) * (TREE_RADIUS / TREE_HEIGHT)
    return y, radius_at_height


def tree_placement(index: int, total: int, rng: Optional[np.random.Generator] = None) -> TreePlacement:
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    y, radius_at_height = _cone(index, total)
    r = radius_at_height * _rng(rng).random() ** RADIAL_BIAS
    angle = index * GOLDEN_ANGLE
    pos = (math.cos(angle) * r, y, math.sin(angle) * r)
    return TreePlacement(pos, angle, r, radius_at_height, (y + TREE_HEIGHT / 2.0) / TREE_HEIGHT)


def tree_placements(count: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Vectorized tree_placement positions for indices 0..count-1, shape (count, 3)."""
    if count <= 0:
        return np.zeros((0, 3))
    i = np.arange(count, dtype=np.float64)
    y, radius_at_height = _cone(i, count)
    r = radius_at_height * _rng(rng).random(count) ** RADIAL_BIAS
    angle = i * GOLDEN_ANGLE
    return np.stack([np.cos(angle) * r, y, np.sin(angle) * r], axis=1)


def scatter_placements(count: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Uniform draws inside the scatter box, shape (count, 3)."""
    extent = np.asarray(SCATTER_EXTENT)
    return (_rng(rng).random((count, 3)) - 0.5) * extent


def scatter_placement(rng: Optional[np.random.Generator] = None) -> Tuple[float, float, float]:
    x, y, z = scatter_placements(1, rng)[0]
    return (float(x), float(y), float(z))


def ribbon_placements(count: int, rng: Optional[np.random.Generator] = None) -> RibbonLayout:
    """
    Two interleaved spirals wound around the outside of the tree: even
    indices form the red strand, odd indices the gold one half a turn away.
    """
    rng = _rng(rng)
    i = np.arange(count)
    t = i / max(count, 1)
    y = t * TREE_HEIGHT - TREE_HEIGHT / 2.0
    radius = (TREE_HEIGHT / 2.0 - y) * (TREE_RADIUS / TREE_HEIGHT) + RIBBON_OFFSET

    is_red = (i % 2) == 0
    offset = np.where(is_red, 0.0, math.pi)
    angle = (y / TREE_HEIGHT) * math.pi * 2.0 * RIBBON_TURNS + offset
    spread = (rng.random(count) - 0.5) * RIBBON_SPREAD
    angle = angle + spread * 0.1

    tree = np.stack([np.cos(angle) * radius, y, np.sin(angle) * radius], axis=1)
    trail = 0.5 + rng.random(count) * 0.5
    return RibbonLayout(tree, angle, radius, y, trail, is_red)


def photo_tree_position(index: int, rng: Optional[np.random.Generator] = None) -> Tuple[float, float, float]:
    """Photos hang in every tenth slot of a sparse cone, pushed slightly outward."""
    slot = (index * PHOTO_SLOT_STRIDE) % PHOTO_SLOTS
    x, y, z = tree_placement(slot, PHOTO_SLOTS, rng).position
    return (x * PHOTO_SPREAD, y * PHOTO_SPREAD, z * PHOTO_SPREAD)
