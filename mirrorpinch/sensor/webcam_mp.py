from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import cv2
import mediapipe as mp

from mirrorpinch.core.types import LandmarkFrame, Vec3
from mirrorpinch.interpreter.normalizer import INDEX_TIP, THUMB_TIP

_hands = mp.solutions.hands
_draw = mp.solutions.drawing_utils

TIP_COLORS = ((THUMB_TIP, (255, 0, 255)), (INDEX_TIP, (0, 255, 0)))


def _landmarks(hand) -> Tuple[Vec3, ...]:
    return tuple((float(p.x), float(p.y), float(p.z)) for p in hand.landmark)


def _annotate(image, hand, pts: Tuple[Vec3, ...]) -> None:
    # skeleton plus the two tips that drive the pinch
    _draw.draw_landmarks(image, hand, _hands.HAND_CONNECTIONS)
    h, w = image.shape[:2]
    for idx, color in TIP_COLORS:
        cv2.circle(image, (int(pts[idx][0] * w), int(pts[idx][1] * h)), 6, color, -1)


@dataclass
class WebcamMPSrc:
    """
    Camera + MediaPipe Hands, tracking a single hand.

    read() hands out raw camera-space landmarks (the normalizer mirrors
    them) together with an annotated, mirrored image for the preview
    panel.
    """
    cam_index: int = 0
    width: int = 640
    height: int = 480
    min_confidence: float = 0.5
    cap: Any = field(init=False, default=None)
    hands: Any = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.cap = cv2.VideoCapture(self.cam_index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.hands = _hands.Hands(
            static_image_mode=False,
            max_num_hands=1,
            model_complexity=1,
            min_detection_confidence=self.min_confidence,
            min_tracking_confidence=self.min_confidence,
        )

    @property
    def available(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def read(self) -> Tuple[Optional[LandmarkFrame], Optional[Any]]:
        """(frame, preview image), or (None, None) if the camera produced nothing."""
        ok, image = self.cap.read()
        if not ok:
            return None, None
        t_ms = int(time.time() * 1000)

        res = self.hands.process(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
        pts = None
        if res.multi_hand_landmarks:
            hand = res.multi_hand_landmarks[0]
            pts = _landmarks(hand)
            _annotate(image, hand, pts)

        return LandmarkFrame(t_ms=t_ms, landmarks=pts), cv2.flip(image, 1)

    def close(self) -> None:
        for release in (self.hands.close, self.cap.release):
            try:
                release()
            except Exception as e:
                print(f"[Camera] close failed: {e}")
