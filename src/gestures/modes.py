# src/gestures/modes.py
"""
Mode state machine driven by gesture symbols.

FIST and OPEN snap to TREE / SCATTER every time they are seen, so holding
the gesture is harmless. PINCH only *enters* INSPECT: it needs at least one
photo and is ignored while already inspecting, which keeps the focused photo
stable for as long as the pinch is held.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

from kivy.logger import Logger

from gestures.classifiers import GestureSymbol


class Mode(Enum):
    TREE = "TREE"
    SCATTER = "SCATTER"
    INSPECT = "INSPECT"


ModeListener = Callable[[Mode, Mode], None]


class ModeController:
    def __init__(self, photos=None, initial: Mode = Mode.TREE, rng=None):
        """
        Args:
            photos: photo collection supporting len(), focus_random(rng) and
                    clear_focus(). None behaves like an empty collection.
            initial: starting mode.
            rng: numpy Generator forwarded to focus_random.
        """
        self.photos = photos
        self.rng = rng
        self._mode = initial
        self._listeners: List[ModeListener] = []

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def photo_count(self) -> int:
        return len(self.photos) if self.photos is not None else 0

    def bind(self, callback: ModeListener):
        """Call `callback(previous, current)` on every mode change."""
        self._listeners.append(callback)

    def update(self, gesture: GestureSymbol) -> Mode:
        target: Optional[Mode] = None
        if gesture is GestureSymbol.FIST:
            target = Mode.TREE
        elif gesture is GestureSymbol.OPEN:
            target = Mode.SCATTER
        elif gesture is GestureSymbol.PINCH:
            if self._mode is not Mode.INSPECT and self.photo_count > 0:
                target = Mode.INSPECT

        if target is not None and target is not self._mode:
            self._transition(target)
        return self._mode

    def _transition(self, target: Mode):
        previous = self._mode
        self._mode = target

        if target is Mode.INSPECT:
            focused = self.photos.focus_random(self.rng)
            Logger.info(f"ModeController: {previous.value} -> INSPECT (photo {focused})")
        else:
            if previous is Mode.INSPECT and self.photos is not None:
                self.photos.clear_focus()
            Logger.info(f"ModeController: {previous.value} -> {target.value}")

        for cb in list(self._listeners):
            cb(previous, target)
