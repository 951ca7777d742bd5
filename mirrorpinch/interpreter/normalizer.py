"""
Landmark frame -> cursor position + pinch metric.

The pinch metric is divided by the mean bone length of the whole hand,
so it reads the same whether the hand is near the camera or far from it.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from mirrorpinch.core.config import PinchCalibration
from mirrorpinch.core.types import (
    LANDMARK_COUNT, LOST_CURSOR, CursorState, Size, Vec3, clamp01,
)

THUMB_TIP = 4
INDEX_TIP = 8

# adjacent-landmark segments spanning the whole hand
HAND_BONES = (
    (0, 1), (1, 2), (2, 3), (3, 4),          # thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # index
    (0, 9), (9, 10), (10, 11), (11, 12),     # middle
    (0, 13), (13, 14), (14, 15), (15, 16),   # ring
    (0, 17), (17, 18), (18, 19), (19, 20),   # pinky
    (5, 9), (9, 13), (13, 17),               # palm
)


def _px(p: Vec3, viewport: Size):
    return p[0] * viewport.width, p[1] * viewport.height


def _dist_px(a: Vec3, b: Vec3, viewport: Size) -> float:
    ax, ay = _px(a, viewport)
    bx, by = _px(b, viewport)
    return math.hypot(ax - bx, ay - by)


def hand_scale_px(landmarks: Sequence[Vec3], viewport: Size) -> float:
    """Mean bone length in viewport pixels."""
    total = sum(_dist_px(landmarks[a], landmarks[b], viewport) for a, b in HAND_BONES)
    return total / len(HAND_BONES)


def normalized_pinch_distance(
    pinch_px: float,
    scale_px: float,
    calibration: PinchCalibration = PinchCalibration(),
) -> float:
    # closer fingertips -> smaller value; clamped to [0, 1]
    denom = max(scale_px * calibration.scale_multiplier, 1e-6)
    return clamp01((pinch_px - calibration.offset_px) / denom)


def classify_pinch(normalized: float, threshold: float):
    """(is_pinching, strength). The threshold itself is not a pinch."""
    is_pinching = normalized < threshold
    strength = clamp01(1.0 - normalized / threshold)
    return is_pinching, strength


def _well_formed(landmarks: Optional[Sequence[Vec3]]) -> bool:
    if landmarks is None or len(landmarks) < LANDMARK_COUNT:
        return False
    for p in landmarks[:LANDMARK_COUNT]:
        if len(p) < 2 or not (math.isfinite(p[0]) and math.isfinite(p[1])):
            return False
    return True


def normalize(
    landmarks: Optional[Sequence[Vec3]],
    viewport: Size,
    pinch_threshold: float = 0.2,
    calibration: PinchCalibration = PinchCalibration(),
) -> CursorState:
    """
    Turn one hand's landmarks into a CursorState.

    A missing or malformed hand yields the lost cursor (detected=False),
    never an exception.
    """
    if not _well_formed(landmarks):
        return LOST_CURSOR
    assert landmarks is not None

    thumb = landmarks[THUMB_TIP]
    index = landmarks[INDEX_TIP]

    # front-facing camera: mirror x so the cursor follows the user's left/right
    mid_x = ((1.0 - thumb[0]) + (1.0 - index[0])) / 2.0
    mid_y = (thumb[1] + index[1]) / 2.0

    pinch_px = _dist_px(thumb, index, viewport)
    nd = normalized_pinch_distance(pinch_px, hand_scale_px(landmarks, viewport), calibration)
    is_pinching, strength = classify_pinch(nd, pinch_threshold)

    return CursorState(
        x=mid_x * viewport.width,
        y=mid_y * viewport.height,
        detected=True,
        is_pinching=is_pinching,
        pinch_strength=strength,
        pinch_distance=nd,
    )
