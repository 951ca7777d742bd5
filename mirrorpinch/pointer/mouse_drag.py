from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mirrorpinch.core.types import Channel, Point, Size, WidgetLayout
from mirrorpinch.interpreter.board import WidgetBoard
from mirrorpinch.interpreter.drag import DragSessionManager
from mirrorpinch.interpreter.hit_test import widget_at
from mirrorpinch.store.layout_store import LayoutStore
from mirrorpinch.store.settings_store import StoreWriteError

# square grip in each widget's bottom-right corner
RESIZE_HANDLE_PX = 20
MIN_WIDGET_SIZE = Size(150, 100)


@dataclass
class ResizeSession:
    target_widget_id: str
    anchor_cursor: Point
    start_size: Size
    size: Size


def resized(start: Size, delta: Point, position: Point, viewport: Size) -> Size:
    # grows up to the viewport edge, never below the minimum (the minimum wins)
    return Size(
        max(MIN_WIDGET_SIZE.width, min(viewport.width - position.x, start.width + delta.x)),
        max(MIN_WIDGET_SIZE.height, min(viewport.height - position.y, start.height + delta.y)),
    )


def on_resize_handle(layout: WidgetLayout, p: Point) -> bool:
    right = layout.position.x + layout.size.width
    bottom = layout.position.y + layout.size.height
    return right - RESIZE_HANDLE_PX <= p.x <= right and bottom - RESIZE_HANDLE_PX <= p.y <= bottom


class PointerDragChannel:
    """
    Mouse / touch drags of the same widgets the hand can move.

    Shares the board and layout store with the gesture engine but owns its
    own session, so the two channels never block each other. A widget
    already held by the hand is ignored by the pointer.

    A press on a widget's resize handle resizes it instead of moving it;
    the new size is saved on release together with the position.
    """

    def __init__(self, board: WidgetBoard, layout_store: LayoutStore) -> None:
        self.board = board
        self.layout_store = layout_store
        self._drag = DragSessionManager(board, layout_store, Channel.POINTER)
        self._resize: Optional[ResizeSession] = None

    @property
    def dragging_widget_id(self) -> Optional[str]:
        s = self._drag.session
        return s.target_widget_id if s else None

    @property
    def resizing_widget_id(self) -> Optional[str]:
        return self._resize.target_widget_id if self._resize else None

    def press(self, x: float, y: float, viewport: Size) -> Optional[str]:
        self.release()
        p = Point(x, y)
        target = widget_at(p, self.board.layouts())
        if target is None or self.board.holder(target) == Channel.GESTURE:
            return None

        layout = self.board.get(target)
        if on_resize_handle(layout, p):
            if not self.board.claim(target, Channel.POINTER):
                return None
            self._resize = ResizeSession(target, p, layout.size, layout.size)
            return target

        if self._drag.begin(target, p) is None:
            return None
        self._drag.update(p, viewport)
        return target

    def move(self, x: float, y: float, viewport: Size) -> Optional[WidgetLayout]:
        r = self._resize
        if r is None:
            return self._drag.update(Point(x, y), viewport)
        layout = self.board.get(r.target_widget_id)
        if layout is None:
            return None
        r.size = resized(r.start_size, Point(x, y) - r.anchor_cursor, layout.position, viewport)
        return self.board.resize(r.target_widget_id, r.size)

    def release(self) -> Optional[WidgetLayout]:
        r = self._resize
        if r is None:
            return self._drag.end()
        self._resize = None
        self.board.release(r.target_widget_id, Channel.POINTER)

        layout = self.board.resize(r.target_widget_id, r.size)
        position = layout.position if layout is not None else self.layout_store.get(r.target_widget_id).position
        try:
            self.layout_store.set(r.target_widget_id, position, r.size)
        except StoreWriteError as e:
            print(f"[Drag] resize of {r.target_widget_id!r} failed to save: {e}")
        return layout
