import numpy as np
import pytest

from conftest import make_hand
from gestures.classifiers import GestureSymbol
from hand_tracking.gesture_tracker import GestureTracker


class ScriptedSource:
    """Returns queued detections in order; an Exception instance is raised instead."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.closed = False

    def detect(self, frame, timestamp_ms):
        self.calls.append(timestamp_ms)
        result = self.results.pop(0) if self.results else []
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


FRAME = np.zeros((4, 4, 3), dtype=np.uint8)


def test_one_state_per_new_frame():
    source = ScriptedSource([make_hand()], [make_hand(extended=(False,) * 5)])
    tracker = GestureTracker(lambda: source)

    first = tracker.process(FRAME, 10)
    assert first.detected and first.gesture is GestureSymbol.OPEN
    assert tracker.process(FRAME, 10) is None
    assert tracker.process(FRAME, 5) is None
    second = tracker.process(FRAME, 11)
    assert second.gesture is GestureSymbol.FIST
    assert source.calls == [10, 11]


def test_no_hand_is_absent():
    tracker = GestureTracker(lambda: ScriptedSource([]))
    state = tracker.process(FRAME, 1)
    assert not state.detected
    assert state.gesture is GestureSymbol.NONE
    assert tracker.last_landmarks is None


def test_detector_error_downgrades_to_absent():
    source = ScriptedSource(RuntimeError("bad frame"), [make_hand()])
    tracker = GestureTracker(lambda: source)
    state = tracker.process(FRAME, 1)
    assert not state.detected
    assert state.gesture is GestureSymbol.NONE
    assert tracker.process(FRAME, 2).detected


def test_pointer_comes_from_landmarks():
    hand = make_hand(wrist=(0.3, 0.7))
    tracker = GestureTracker(lambda: ScriptedSource([hand]))
    state = tracker.process(FRAME, 1)
    assert 0.0 <= state.pointer[0] <= 1.0
    assert state.pointer[0] > 0.5      # mirrored
    assert tracker.last_landmarks is hand


def test_load_error_is_sticky_and_reported_once():
    def factory():
        raise FileNotFoundError("hand_landmarker.task")

    tracker = GestureTracker(factory)
    assert tracker.failed
    err = tracker.take_load_error()
    assert isinstance(err, FileNotFoundError)
    assert tracker.take_load_error() is None
    assert tracker.failed
    assert tracker.process(FRAME, 1) is None
    assert tracker.process(FRAME, 2) is None


def test_healthy_tracker_has_no_load_error():
    tracker = GestureTracker(lambda: ScriptedSource())
    assert not tracker.failed
    assert tracker.take_load_error() is None


def test_close_releases_source_once():
    source = ScriptedSource()
    tracker = GestureTracker(lambda: source)
    tracker.close()
    tracker.close()
    assert source.closed
    assert tracker.process(FRAME, 1) is None
