# src/choreography/field.py
"""
Particle fields: flat arrays of records animated once per tick.

A field keeps its immutable FieldLayout plus three mutable arrays (current
positions, rotations and scales). update() computes the target pose for the
whole field in one vectorized call and eases every array toward it, so no
record ever jumps, not even when the mode changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from kivy.logger import Logger

from choreography import layout as lay
from choreography.motion import damp, damp_factor, nlerp_quats
from choreography.palette import foliage_colors, photo_colors, ribbon_colors
from choreography.records import FieldLayout, ParticleKind, ParticleRecord, PhotoRecord
from choreography.targets import compute_targets
from gestures.modes import Mode


@dataclass(frozen=True)
class MotionRates:
    position: float
    rotation: float
    scale: float


FOLIAGE_RATES = MotionRates(position=3.0, rotation=3.0, scale=3.0)
RIBBON_RATES = MotionRates(position=5.0, rotation=8.0, scale=5.0)
PHOTO_RATES = MotionRates(position=3.0, rotation=4.0, scale=3.0)


@dataclass
class FieldFrame:
    """What a renderer needs for one field, one row per record index.

    Arrays are read-only snapshots taken at the end of update().
    """
    kind: ParticleKind
    positions: np.ndarray
    rotations: np.ndarray
    scales: np.ndarray
    colors: Optional[np.ndarray] = None    # only set when the record set changed
    focused: Optional[int] = None

    def __len__(self):
        return len(self.positions)


def _snapshot(arr: np.ndarray) -> np.ndarray:
    """Read-only copy handed to sinks; later ticks never touch it."""
    out = arr.copy()
    out.setflags(write=False)
    return out


def _tuple(row) -> tuple:
    return tuple(float(v) for v in row)


class ParticleField:
    def __init__(self, kind: ParticleKind, layout: FieldLayout, rates: MotionRates):
        self.kind = kind
        self.rates = rates
        self.layout = FieldLayout.empty()
        self._positions = np.zeros((0, 3))
        self._rotations = np.zeros((0, 4))
        self._scales = np.zeros((0, 3))
        self._colors_dirty = True
        self._grow(layout)

    def __len__(self) -> int:
        return len(self.layout)

    @property
    def focused(self) -> Optional[int]:
        return None

    @property
    def positions(self) -> np.ndarray:
        return self._positions.copy()

    @property
    def rotations(self) -> np.ndarray:
        return self._rotations.copy()

    @property
    def scales(self) -> np.ndarray:
        return self._scales.copy()

    def _grow(self, extra: FieldLayout):
        """Append records; they start at rest on their tree pose."""
        n = len(extra)
        if n == 0:
            return
        self.layout = self.layout.extend(extra)
        start = compute_targets(self.kind, Mode.TREE, self.layout, 0.0)
        self._positions = np.concatenate([self._positions, extra.tree])
        self._rotations = np.concatenate([self._rotations, start.rotations[-n:]])
        self._scales = np.concatenate([self._scales, start.scales[-n:]])
        self._colors_dirty = True

    def update(self, mode: Mode, elapsed: float, dt: float) -> FieldFrame:
        target = compute_targets(self.kind, mode, self.layout, elapsed, self.focused)

        damp(self._positions, target.positions, self.rates.position, dt, out=self._positions)
        damp(self._scales, target.scales, self.rates.scale, dt, out=self._scales)
        if len(self):
            self._rotations = nlerp_quats(self._rotations, target.rotations,
                                          damp_factor(self.rates.rotation, dt))

        colors = None
        if self._colors_dirty:
            colors = self.layout.colors
            self._colors_dirty = False
        return FieldFrame(self.kind, _snapshot(self._positions), _snapshot(self._rotations),
                          _snapshot(self._scales),
                          colors=colors, focused=self.focused)

    def record(self, index: int) -> ParticleRecord:
        lo = self.layout
        extra = {}
        if lo.angle is not None:
            extra = dict(
                angular_offset=float(lo.angle[index]),
                orbit_radius=float(lo.radius[index]),
                height=float(lo.height[index]),
                trail_length=float(lo.trail[index]),
            )
        return ParticleRecord(
            index=index,
            kind=self.kind,
            tree_position=_tuple(lo.tree[index]),
            scatter_position=_tuple(lo.scatter[index]),
            base_color=_tuple(lo.colors[index]),
            size_scale=float(lo.size[index]),
            phase_offset=float(lo.phase[index]),
            current_position=_tuple(self._positions[index]),
            **extra,
        )


class PhotoField(ParticleField):
    """Append-only photo cards, at most one of which is focused."""

    def __init__(self, rng: Optional[np.random.Generator] = None, rates: MotionRates = PHOTO_RATES):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.image_refs: List[str] = []
        self._focused: Optional[int] = None
        super().__init__(ParticleKind.PHOTO, FieldLayout.empty(), rates)

    @property
    def focused(self) -> Optional[int]:
        return self._focused

    def append(self, image_refs: Sequence[str]) -> int:
        """Add new photos at the end; returns how many were added."""
        refs = [str(r) for r in image_refs]
        if not refs:
            return 0
        first = len(self.image_refs)
        n = len(refs)
        tree = np.array([lay.photo_tree_position(first + k, self.rng) for k in range(n)])
        extra = FieldLayout(
            tree=tree,
            scatter=lay.scatter_placements(n, self.rng),
            phase=self.rng.random(n) * np.pi * 2.0,
            size=np.ones(n),
            colors=photo_colors(n),
        )
        self.image_refs.extend(refs)
        self._grow(extra)
        Logger.info(f"PhotoField: {n} photo(s) added, {len(self.image_refs)} total.")
        return n

    def focus_random(self, rng: Optional[np.random.Generator] = None) -> Optional[int]:
        if not self.image_refs:
            self._focused = None
            return None
        rng = rng if rng is not None else self.rng
        self._focused = int(rng.integers(len(self.image_refs)))
        return self._focused

    def clear_focus(self):
        self._focused = None

    def record(self, index: int) -> PhotoRecord:
        base = super().record(index)
        return PhotoRecord(
            **vars(base),
            image_ref=self.image_refs[index],
            is_focused=(index == self._focused),
        )


def make_foliage_field(count: int, rng: np.random.Generator, rates: MotionRates = FOLIAGE_RATES) -> ParticleField:
    layout = FieldLayout(
        tree=lay.tree_placements(count, rng),
        scatter=lay.scatter_placements(count, rng),
        phase=rng.random(count) * np.pi * 2.0,
        size=0.08 + rng.random(count) * 0.06,
        colors=foliage_colors(count, rng),
    )
    return ParticleField(ParticleKind.FOLIAGE, layout, rates)


def make_ribbon_field(count: int, rng: np.random.Generator, rates: MotionRates = RIBBON_RATES) -> ParticleField:
    spiral = lay.ribbon_placements(count, rng)
    layout = FieldLayout(
        tree=spiral.tree,
        scatter=lay.scatter_placements(count, rng),
        phase=rng.random(count) * np.pi * 2.0,
        size=np.full(count, 0.1),
        colors=ribbon_colors(spiral.is_red),
        angle=spiral.angle,
        radius=spiral.radius,
        height=spiral.height,
        trail=spiral.trail,
    )
    return ParticleField(ParticleKind.RIBBON, layout, rates)
