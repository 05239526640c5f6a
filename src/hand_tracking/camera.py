# src/hand_tracking/camera.py
import threading
import time

import cv2
from kivy.logger import Logger

from hand_tracking.hands import HandTracker


class VideoController:
    """
    Reads the webcam on a worker thread and feeds frames to a GestureTracker.

    The worker is the only writer of `latest` and `preview`. Both are replaced
    wholesale (a single attribute rebind), so the UI thread can read them at
    any time and always sees a complete value. Nothing is queued: a reader
    that falls behind simply gets the newest result.
    """

    def __init__(self, gesture_tracker, cam_index=0, capture=None, draw_landmarks=True):
        self.tracker = gesture_tracker
        self.draw_landmarks = draw_landmarks

        self.cam = capture if capture is not None else cv2.VideoCapture(cam_index)
        if not self.cam.isOpened():
            raise RuntimeError(f"Could not open webcam (index {cam_index}).")
        self.running = False
        self._thread = None
        self._ts0 = None

        self.latest = (0, None)   # (sequence, HandState)
        self.preview = None       # RGB frame for the preview widget

    def _mono_ms(self):
        now = time.perf_counter()
        if self._ts0 is None: self._ts0 = now
        return int((now - self._ts0) * 1000.0)

    def start(self):
        self.running = True
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    def stop(self):
        self.running = False
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        try:
            self.cam.release()
        except Exception as e:
            Logger.debug(f"VideoController: camera release failed: {e}")
        if self.tracker is not None:
            self.tracker.close()

    def step(self):
        """Read and process one frame. Returns False when no frame was available."""
        ok, frame = self.cam.read()
        if not ok:
            return False

        ts = self._mono_ms()
        state = self.tracker.process(frame, ts) if self.tracker is not None else None
        if state is not None:
            seq = self.latest[0] + 1
            self.latest = (seq, state)

        shown = frame
        hand = getattr(self.tracker, "last_landmarks", None)
        if self.draw_landmarks and hand:
            shown = frame.copy()
            HandTracker.draw(shown, [hand])
        self.preview = cv2.cvtColor(shown, cv2.COLOR_BGR2RGB)
        return True

    def _loop(self):
        Logger.info("VideoController: capture loop started.")
        while self.running:
            try:
                if not self.step():
                    time.sleep(0.02)
                    continue
            except Exception as e:
                Logger.warning(f"VideoController: frame skipped: {e}")
            time.sleep(0.001)
        Logger.info("VideoController: capture loop stopped.")
