# src/gestures/hand_state.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from gestures.classifiers import GestureSymbol

CENTER = (0.5, 0.5)


@dataclass(frozen=True)
class HandState:
    """One tracking result per new video frame."""
    detected: bool
    gesture: GestureSymbol
    pointer: Tuple[float, float] = CENTER

    @staticmethod
    def absent() -> "HandState":
        return HandState(detected=False, gesture=GestureSymbol.NONE, pointer=CENTER)
