# src/choreography/palette.py
"""Base colors per particle type. Values above 1.0 are HDR glow."""

from __future__ import annotations

import numpy as np


def hex_rgb(code: str) -> np.ndarray:
    code = code.lstrip("#")
    return np.array([int(code[i:i + 2], 16) / 255.0 for i in (0, 2, 4)], dtype=np.float64)


FOLIAGE_DARK = hex_rgb("#0a4f1c")
FOLIAGE_MID = hex_rgb("#2ec255")
FOLIAGE_LITE = hex_rgb("#66ff99")
FOLIAGE_GLOW = 4.0

RIBBON_GOLD = hex_rgb("#ffaa00")
RIBBON_RED = hex_rgb("#ff0000")
GOLD_GLOW = 30.0
RED_GLOW = 25.0

PHOTO_FRAME = hex_rgb("#D4AF37")


def foliage_colors(count: int, rng: np.random.Generator) -> np.ndarray:
    mix = rng.random(count)[:, None]
    colors = FOLIAGE_DARK + (FOLIAGE_LITE - FOLIAGE_DARK) * mix
    # one in five leans toward the mid green
    accent = rng.random(count) > 0.8
    colors[accent] += (FOLIAGE_MID - colors[accent]) * 0.5
    return colors * FOLIAGE_GLOW


def ribbon_colors(is_red: np.ndarray) -> np.ndarray:
    return np.where(is_red[:, None], RIBBON_RED * RED_GLOW, RIBBON_GOLD * GOLD_GLOW)


def photo_colors(count: int) -> np.ndarray:
    return np.tile(PHOTO_FRAME, (count, 1))
