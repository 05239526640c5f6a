# src/hand_tracking/gesture_tracker.py
"""
Turns raw landmark detections into one HandState per new video frame.

Detector errors never escape: a frame that fails is reported as "no hand".
A detector that fails to load stays failed for the whole session; the error
is handed out once through take_load_error() so the UI can show it.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol, Sequence

from kivy.logger import Logger

from gestures.classifiers import classify, hand_pointer
from gestures.hand_state import HandState


class LandmarkSource(Protocol):
    def detect(self, frame: Any, timestamp_ms: int) -> List[Sequence]: ...

    def close(self) -> None: ...


class GestureTracker:
    def __init__(self, source_factory: Callable[[], LandmarkSource]):
        self._source: Optional[LandmarkSource] = None
        self._load_error: Optional[BaseException] = None
        self._load_error_taken = False
        self._last_ts: Optional[int] = None
        self.last_state: Optional[HandState] = None
        self.last_landmarks: Optional[Sequence] = None

        try:
            self._source = source_factory()
            Logger.info("GestureTracker: landmark source ready.")
        except Exception as e:
            self._load_error = e
            Logger.exception(f"GestureTracker: landmark source failed to load: {e}")

    @property
    def failed(self) -> bool:
        return self._load_error is not None

    def take_load_error(self) -> Optional[BaseException]:
        """Return the load error the first time it is asked for, then None."""
        if self._load_error is None or self._load_error_taken:
            return None
        self._load_error_taken = True
        return self._load_error

    def process(self, frame, timestamp_ms: int) -> Optional[HandState]:
        """
        Returns None when tracking is unavailable or the timestamp has not
        advanced since the last processed frame; otherwise a HandState.
        """
        if self._source is None:
            return None
        if self._last_ts is not None and timestamp_ms <= self._last_ts:
            return None
        self._last_ts = timestamp_ms

        lm = None
        try:
            hands = self._source.detect(frame, timestamp_ms)
            if not hands:
                state = HandState.absent()
            else:
                lm = hands[0]
                state = HandState(detected=True, gesture=classify(lm), pointer=hand_pointer(lm))
        except Exception as e:
            Logger.warning(f"GestureTracker: detection failed at {timestamp_ms} ms: {e}")
            state = HandState.absent()
            lm = None

        self.last_landmarks = lm
        self.last_state = state
        return state

    def close(self):
        if self._source is None:
            return
        try:
            self._source.close()
        except Exception as e:
            Logger.debug(f"GestureTracker: issue closing landmark source: {e}")
        self._source = None
