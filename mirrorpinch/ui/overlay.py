"""
Render surface: widgets as boxes plus the hand cursor indicator.

Drawing happens on a BGR canvas (numpy array) that the runtime shows
with cv2.imshow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from mirrorpinch.core.types import Channel, CursorState, Size, WidgetLayout
from mirrorpinch.pointer.mouse_drag import RESIZE_HANDLE_PX

BGR = Tuple[int, int, int]

ACCENT_HEX = "#10B981"


def hex_to_bgr(hex_color: str) -> BGR:
    s = hex_color.lstrip("#")
    v = int(s, 16)
    return (v & 255, (v >> 8) & 255, (v >> 16) & 255)


@dataclass(frozen=True)
class CursorIndicator:
    """Geometry of the cursor ring for one frame, in pixels."""
    center: Tuple[float, float]
    size: float            # ring diameter
    border_width: float
    fill_opacity: float
    glow: float
    dot_size: float
    ripple: bool           # extra ring while pinching


def cursor_indicator(cursor: CursorState) -> Optional[CursorIndicator]:
    """Ring shrinks and brightens as the pinch closes. None when no hand."""
    if not cursor.detected:
        return None
    s = cursor.pinch_strength
    pinching = cursor.is_pinching
    base_glow, pinch_glow = (30.0, 60.0) if pinching else (20.0, 40.0)
    return CursorIndicator(
        center=(cursor.x, cursor.y),
        size=32.0 - 8.0 * s,
        border_width=3.0 + 2.0 * s if pinching else 4.0,
        fill_opacity=0.2 + 0.6 * s if pinching else 0.2,
        glow=base_glow + (pinch_glow - base_glow) * s,
        dot_size=4.0 + 2.0 * s,
        ripple=pinching,
    )


def blank_canvas(viewport: Size) -> np.ndarray:
    return np.zeros((int(viewport.height), int(viewport.width), 3), dtype=np.uint8)


def _blend_rect(canvas: np.ndarray, p0, p1, color: BGR, alpha: float) -> None:
    overlay = canvas.copy()
    cv2.rectangle(overlay, p0, p1, color, -1)
    cv2.addWeighted(overlay, alpha, canvas, 1.0 - alpha, 0, dst=canvas)


def draw_board(
    canvas: np.ndarray,
    layouts,
    names: Dict[str, str],
    focused_id: Optional[str] = None,
    held: Optional[Dict[str, Channel]] = None,
    accent: str = ACCENT_HEX,
) -> None:
    held = held or {}
    acc = hex_to_bgr(accent)
    # dragged widgets are painted last so they sit on top
    order = sorted(layouts, key=lambda l: (l.id in held, l.z_order))
    for layout in order:
        _draw_widget(canvas, layout, names.get(layout.id, layout.id),
                     focused=layout.id == focused_id, dragged=layout.id in held, accent=acc)


def _draw_widget(canvas: np.ndarray, layout: WidgetLayout, label: str,
                 focused: bool, dragged: bool, accent: BGR) -> None:
    x0, y0 = int(layout.position.x), int(layout.position.y)
    x1, y1 = int(layout.position.x + layout.size.width), int(layout.position.y + layout.size.height)

    _blend_rect(canvas, (x0, y0), (x1, y1), (20, 20, 20), 0.8)
    if dragged:
        cv2.rectangle(canvas, (x0 - 2, y0 - 2), (x1 + 2, y1 + 2), (246, 130, 59), 3)
    elif focused:
        cv2.rectangle(canvas, (x0 - 1, y0 - 1), (x1 + 1, y1 + 1), accent, 2)
    else:
        cv2.rectangle(canvas, (x0, y0), (x1, y1), (80, 80, 80), 1)

    cv2.putText(canvas, label, (x0 + 10, y0 + 28),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (235, 235, 235), 1, cv2.LINE_AA)

    # resize grip
    for k in (6, 12, RESIZE_HANDLE_PX - 2):
        cv2.line(canvas, (x1 - k, y1 - 2), (x1 - 2, y1 - k), (140, 140, 140), 1, cv2.LINE_AA)


def draw_cursor(canvas: np.ndarray, indicator: Optional[CursorIndicator], accent: str = ACCENT_HEX) -> None:
    if indicator is None:
        return
    acc = hex_to_bgr(accent)
    cx, cy = int(indicator.center[0]), int(indicator.center[1])
    r = max(1, int(indicator.size / 2))

    # glow: a few fading rings out to the glow radius
    for i in range(1, 4):
        gr = r + int(indicator.glow * i / 6)
        cv2.circle(canvas, (cx, cy), gr, acc, 1, cv2.LINE_AA)

    overlay = canvas.copy()
    cv2.circle(overlay, (cx, cy), r, acc, -1, cv2.LINE_AA)
    cv2.addWeighted(overlay, indicator.fill_opacity, canvas, 1.0 - indicator.fill_opacity, 0, dst=canvas)

    cv2.circle(canvas, (cx, cy), r, acc, max(1, int(indicator.border_width)), cv2.LINE_AA)
    cv2.circle(canvas, (cx, cy), max(1, int(indicator.dot_size / 2)), acc, -1, cv2.LINE_AA)
    if indicator.ripple:
        cv2.circle(canvas, (cx, cy), r + 4, (255, 255, 255), 2, cv2.LINE_AA)
