# src/choreography/records.py
from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


class ParticleKind(Enum):
    FOLIAGE = "foliage"
    RIBBON = "ribbon"
    PHOTO = "photo"


def _frozen(arr) -> np.ndarray:
    arr = np.array(arr, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class FieldLayout:
    """
    Immutable per-record parameters of one field, one row per record.

    Every array is copied and flagged read-only on construction. The
    ribbon-only columns stay None for other kinds.
    """
    tree: np.ndarray              # (N, 3)
    scatter: np.ndarray           # (N, 3)
    phase: np.ndarray             # (N,)
    size: np.ndarray              # (N,)
    colors: np.ndarray            # (N, 3)
    angle: Optional[np.ndarray] = None
    radius: Optional[np.ndarray] = None
    height: Optional[np.ndarray] = None
    trail: Optional[np.ndarray] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                object.__setattr__(self, f.name, _frozen(value))

    def __len__(self) -> int:
        return len(self.phase)

    @staticmethod
    def empty() -> "FieldLayout":
        return FieldLayout(np.zeros((0, 3)), np.zeros((0, 3)), np.zeros(0), np.zeros(0), np.zeros((0, 3)))

    def extend(self, other: "FieldLayout") -> "FieldLayout":
        """New layout with `other`'s rows appended; self is unchanged."""
        if len(self) == 0:
            return other
        if len(other) == 0:
            return self
        merged = {}
        for f in fields(self):
            a, b = getattr(self, f.name), getattr(other, f.name)
            if a is None or b is None:
                merged[f.name] = None
            else:
                merged[f.name] = np.concatenate([a, b])
        return FieldLayout(**merged)


@dataclass(frozen=True)
class ParticleRecord:
    index: int
    kind: ParticleKind
    tree_position: Vec3
    scatter_position: Vec3
    base_color: Vec3
    size_scale: float
    phase_offset: float
    current_position: Vec3
    angular_offset: Optional[float] = None
    orbit_radius: Optional[float] = None
    height: Optional[float] = None
    trail_length: Optional[float] = None


@dataclass(frozen=True)
class PhotoRecord(ParticleRecord):
    image_ref: str = ""
    is_focused: bool = False
