import math
import os
import tempfile

# Kivy reads these at import time; keep it away from sys.argv and the user's ~/.kivy.
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_HOME", tempfile.mkdtemp(prefix="kivy_home_"))

import numpy as np
import pytest

from gestures.classifiers import DIGITS, NUM_LANDMARKS, WRIST, Landmark
from gestures.classifiers import GestureSymbol
from gestures.hand_state import HandState

# Digit directions in degrees, thumb first (image y grows downward).
DIGIT_ANGLES = (160.0, 110.0, 90.0, 70.0, 50.0)
BASE_LEN = 0.1
EXTENDED_LEN = 0.25
CURLED_LEN = 0.12


def make_hand(extended=(True, True, True, True, True), wrist=(0.5, 0.8), pinch=False):
    """
    Synthetic 21-point hand. Each digit's base sits BASE_LEN from the wrist;
    its tip sits EXTENDED_LEN (extended) or CURLED_LEN (curled) away along
    the same direction. With pinch=True the index tip is moved next to the
    thumb tip.
    """
    wx, wy = wrist
    pts = [(wx, wy)] * NUM_LANDMARKS
    for (tip, base), angle, ext in zip(DIGITS, DIGIT_ANGLES, extended):
        dx, dy = math.cos(math.radians(angle)), -math.sin(math.radians(angle))
        length = EXTENDED_LEN if ext else CURLED_LEN
        pts[base] = (wx + dx * BASE_LEN, wy + dy * BASE_LEN)
        pts[tip] = (wx + dx * length, wy + dy * length)
        # joints between base and tip
        for k in range(base + 1, tip):
            t = (k - base) / (tip - base)
            pts[k] = (pts[base][0] + (pts[tip][0] - pts[base][0]) * t,
                      pts[base][1] + (pts[tip][1] - pts[base][1]) * t)
    if pinch:
        tx, ty = pts[4]
        pts[8] = (tx + 0.01, ty)
    pts[WRIST] = (wx, wy)
    return [Landmark(x, y) for x, y in pts]


def hand_state(gesture, pointer=(0.5, 0.5)):
    return HandState(detected=gesture is not GestureSymbol.NONE, gesture=gesture, pointer=pointer)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
