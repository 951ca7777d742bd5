"""
mirrorpinch: CORE CONTRACTS

Shared value types for the gesture cursor and drag engine.
Everything that crosses a stage boundary (perception -> normalizer ->
state machine -> hit test -> drag manager -> layout store) lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# ============================================================
# Perception -> Engine
# ============================================================

Vec3 = Tuple[float, float, float]

LANDMARK_COUNT = 21


@dataclass(frozen=True)
class LandmarkFrame:
    """
    One perception cycle for a single hand.

    landmarks is None when no hand was detected. Otherwise it holds the
    21 (x, y, z) points in normalized camera space, x/y in [0, 1].
    A frame with fewer points is malformed and treated as "no hand".
    """
    t_ms: int
    landmarks: Optional[Tuple[Vec3, ...]] = None


# ============================================================
# Geometry
# ============================================================

@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


# ============================================================
# Engine outputs
# ============================================================

@dataclass(frozen=True)
class CursorState:
    """Cursor snapshot for one frame. Screen pixels; pinch_distance is normalized."""
    x: float = 0.0
    y: float = 0.0
    detected: bool = False
    is_pinching: bool = False
    pinch_strength: float = 0.0
    pinch_distance: float = 1.0

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


LOST_CURSOR = CursorState()


class GestureState(str, Enum):
    IDLE = "IDLE"
    DRAGGING = "DRAGGING"


class Channel(str, Enum):
    GESTURE = "GESTURE"
    POINTER = "POINTER"


@dataclass(frozen=True)
class WidgetLayout:
    """
    Position + size of one widget on the display surface.

    z_order decides which of several overlapping widgets is on top.
    """
    id: str
    position: Point
    size: Size
    z_order: int = 0

    def contains(self, p: Point) -> bool:
        # edges count as inside
        return (
            self.position.x <= p.x <= self.position.x + self.size.width
            and self.position.y <= p.y <= self.position.y + self.size.height
        )


@dataclass
class DragSession:
    """
    Lifetime of one drag.

    anchor_* are captured when the drag starts; position is the last
    clamped position computed for the widget.
    """
    target_widget_id: str
    anchor_cursor: Point
    anchor_widget_position: Point
    widget_size: Size
    position: Point


@dataclass(frozen=True)
class FrameResult:
    """Everything the render surface needs after one processed frame."""
    cursor: CursorState
    gesture_state: GestureState
    focused_widget_id: Optional[str] = None
    dragging_widget_id: Optional[str] = None
    committed: Optional[WidgetLayout] = None


def clamp(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)
