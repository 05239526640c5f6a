# src/gestures/classifiers.py
"""
Gesture classifier used by the GestureTracker.

All functions expect a MediaPipe-style landmark sequence with:
    landmarks[i].x
    landmarks[i].y

This file defines:
    - classify(landmarks)      -> GestureSymbol
    - hand_pointer(landmarks)  -> mirrored (x, y) hand centroid
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

# MediaPipe Tasks landmark indices
WRIST       = 0
THUMB_BASE  = 2
THUMB_TIP   = 4
INDEX_BASE  = 5
INDEX_TIP   = 8
MIDDLE_BASE = 9
MIDDLE_TIP  = 12
RING_BASE   = 13
RING_TIP    = 16
PINKY_BASE  = 17
PINKY_TIP   = 20

NUM_LANDMARKS = 21

# (tip, base) per digit, thumb first
DIGITS: Tuple[Tuple[int, int], ...] = (
    (THUMB_TIP,  THUMB_BASE),
    (INDEX_TIP,  INDEX_BASE),
    (MIDDLE_TIP, MIDDLE_BASE),
    (RING_TIP,   RING_BASE),
    (PINKY_TIP,  PINKY_BASE),
)

EXTENSION_RATIO = 1.5
PINCH_THRESHOLD = 0.05


class GestureSymbol(Enum):
    FIST = "FIST"
    OPEN = "OPEN"
    PINCH = "PINCH"
    NONE = "NONE"


@dataclass(frozen=True)
class Landmark:
    """Normalized landmark; z is carried along but never used here."""
    x: float
    y: float
    z: float = 0.0


# ---------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------

def _pt(lm, idx):
    """Return a 2D point for convenience."""
    return np.array([lm[idx].x, lm[idx].y], dtype=np.float64)

def _dist(a, b):
    """Euclidean distance in normalized screen space."""
    return float(np.linalg.norm(a - b))

def _check(lm):
    if len(lm) < NUM_LANDMARKS:
        raise ValueError(f"expected {NUM_LANDMARKS} landmarks, got {len(lm)}")


def finger_extended(lm, tip: int, base: int) -> bool:
    """
    A digit is extended if its TIP is more than EXTENSION_RATIO times as far
    from the wrist as its base joint.
    """
    w = _pt(lm, WRIST)
    return _dist(_pt(lm, tip), w) > EXTENSION_RATIO * _dist(_pt(lm, base), w)


def extended_digits(lm) -> List[bool]:
    """Extension flags for thumb, index, middle, ring, pinky."""
    _check(lm)
    return [finger_extended(lm, tip, base) for tip, base in DIGITS]


def pinch_distance(lm) -> float:
    """Distance between thumb tip and index tip."""
    _check(lm)
    return _dist(_pt(lm, THUMB_TIP), _pt(lm, INDEX_TIP))


# ---------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------

def classify(lm: Sequence) -> GestureSymbol:
    """
    Map one hand's landmarks to a gesture symbol.

    The pinch check runs first so a pinch wins regardless of how many
    digits look extended. Partial extension yields NONE, which callers
    treat as "keep the current mode".
    """
    if pinch_distance(lm) < PINCH_THRESHOLD:
        return GestureSymbol.PINCH

    count = sum(extended_digits(lm))
    if count == len(DIGITS):
        return GestureSymbol.OPEN
    if count == 0:
        return GestureSymbol.FIST
    return GestureSymbol.NONE


def hand_pointer(lm: Sequence) -> Tuple[float, float]:
    """
    Midpoint of the wrist and the middle-finger base, x mirrored to undo
    the front camera's left/right flip.
    """
    _check(lm)
    x = (lm[WRIST].x + lm[MIDDLE_BASE].x) / 2.0
    y = (lm[WRIST].y + lm[MIDDLE_BASE].y) / 2.0
    return (1.0 - float(x), float(y))
