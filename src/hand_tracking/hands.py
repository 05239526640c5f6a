"""
LumiTree - Hand Tracking Module (MediaPipe Tasks HandLandmarker)

- Single hand, IMAGE or VIDEO running mode.
- detect() returns plain Landmark lists so the rest of the code never
  touches MediaPipe result objects.

Model expectation:
    models/hand_landmarker.task
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from gestures.classifiers import Landmark

HAND_CONNECTIONS = [
    (0,1),(1,2),(2,3),(3,4),
    (0,5),(5,6),(6,7),(7,8),
    (5,9),(9,10),(10,11),(11,12),
    (9,13),(13,14),(14,15),(15,16),
    (13,17),(17,18),(18,19),(19,20),
    (0,17),
]


class HandTracker:
    """LandmarkSource backed by MediaPipe's HandLandmarker."""

    def __init__(
        self,
        model_asset_path: str = "models/hand_landmarker.task",
        detection_confidence: float = 0.6,
        tracking_confidence: float = 0.6,
        running_mode: str = "VIDEO",               # 'IMAGE' | 'VIDEO'
    ):
        """
        Args:
            model_asset_path: Path to the .task model file.
            detection_confidence: Min detection confidence.
            tracking_confidence: Min presence/tracking confidence.
            running_mode: 'IMAGE' | 'VIDEO'.

        Raises:
            FileNotFoundError: model file missing.
            ValueError: unsupported running mode.
        """
        self.model_asset_path = model_asset_path
        self.det_conf = float(detection_confidence)
        self.trk_conf = float(tracking_confidence)
        self.running_mode = running_mode.upper()

        # ---- Import MediaPipe Tasks (vision) ----
        import mediapipe as mp
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision as mp_vision

        self._mp = mp
        self._mp_vision = mp_vision

        model_p = Path(self.model_asset_path).expanduser().resolve()
        if not model_p.exists():
            raise FileNotFoundError(
                "HandTracker could not find the model file.\n"
                f"Expected at: {model_p}\n"
                "Download 'hand_landmarker.task' into <project_root>/src/models/ "
                "or pass HandTracker(model_asset_path=...)."
            )

        rm_map = {
            "IMAGE": mp_vision.RunningMode.IMAGE,
            "VIDEO": mp_vision.RunningMode.VIDEO,
        }
        if self.running_mode not in rm_map:
            raise ValueError("running_mode must be one of: IMAGE, VIDEO")
        self._rm = rm_map[self.running_mode]

        options = mp_vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=str(model_p)),
            num_hands=1,
            min_hand_detection_confidence=self.det_conf,
            min_hand_presence_confidence=self.trk_conf,
            min_tracking_confidence=self.trk_conf,
            running_mode=self._rm,
        )
        self._hands = mp_vision.HandLandmarker.create_from_options(options)

    @staticmethod
    def _extract(tasks_result) -> List[List[Landmark]]:
        if tasks_result is None or not getattr(tasks_result, "hand_landmarks", None):
            return []
        return [
            [Landmark(float(lm.x), float(lm.y), float(lm.z)) for lm in hand_lms]
            for hand_lms in tasks_result.hand_landmarks
        ]

    def detect(self, frame_bgr: np.ndarray, timestamp_ms: Optional[int] = None) -> List[List[Landmark]]:
        """
        Run the landmarker on one BGR frame.

        Args:
            frame_bgr: BGR frame (np.ndarray).
            timestamp_ms: Required in VIDEO mode (monotonic increasing).

        Returns:
            One list of 21 landmarks per detected hand (at most one).
        """
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb)

        if self._rm == self._mp_vision.RunningMode.VIDEO:
            if timestamp_ms is None:
                raise ValueError("timestamp_ms is required in VIDEO mode.")
            result = self._hands.detect_for_video(mp_image, int(timestamp_ms))
        else:
            result = self._hands.detect(mp_image)
        return self._extract(result)

    @staticmethod
    def draw(image_bgr: np.ndarray, hands: List[List[Landmark]]):
        """Draw landmarks and bones in place (normalized coords -> pixels)."""
        if not hands:
            return
        h, w = image_bgr.shape[:2]
        thickness = max(2, int(0.003 * (w + h)))
        radius = max(3, int(0.004 * (w + h)))
        for hand in hands:
            pts = [(int(p.x * w), int(p.y * h)) for p in hand]
            for a, b in HAND_CONNECTIONS:
                cv2.line(image_bgr, pts[a], pts[b], (60, 200, 240), thickness)
            for (x, y) in pts:
                cv2.circle(image_bgr, (x, y), radius, (255, 255, 255), -1)

    def close(self):
        if self._hands is not None and hasattr(self._hands, "close"):
            self._hands.close()
        self._hands = None
