from __future__ import annotations

from typing import Optional

from mirrorpinch.core.types import Channel, DragSession, Point, Size, WidgetLayout
from mirrorpinch.interpreter.board import WidgetBoard, clamp_position
from mirrorpinch.store.layout_store import LayoutStore
from mirrorpinch.store.settings_store import StoreWriteError


class DragSessionManager:
    """
    Owns at most one drag for one input channel.

    begin() captures the anchor, update() moves the widget on the board
    every frame, end() commits the last computed position to the layout
    store. Starting a new drag while one is active completes the old one
    first.
    """

    def __init__(self, board: WidgetBoard, layout_store: LayoutStore, channel: Channel) -> None:
        self.board = board
        self.layout_store = layout_store
        self.channel = channel
        self.session: Optional[DragSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def begin(self, widget_id: str, cursor: Point) -> Optional[DragSession]:
        if self.session is not None:
            self.end()

        layout = self.board.get(widget_id)
        if layout is None or not self.board.claim(widget_id, self.channel):
            return None

        self.session = DragSession(
            target_widget_id=widget_id,
            anchor_cursor=cursor,
            anchor_widget_position=layout.position,
            widget_size=layout.size,
            position=layout.position,
        )
        return self.session

    def update(self, cursor: Point, container: Size) -> Optional[WidgetLayout]:
        s = self.session
        if s is None:
            return None
        candidate = s.anchor_widget_position + (cursor - s.anchor_cursor)
        s.position = clamp_position(candidate, s.widget_size, container)
        return self.board.move(s.target_widget_id, s.position)

    def end(self) -> Optional[WidgetLayout]:
        """Commit and clear. Returns the committed layout, or None if idle."""
        s = self.session
        if s is None:
            return None
        self.session = None
        self.board.release(s.target_widget_id, self.channel)

        layout = self.board.move(s.target_widget_id, s.position)
        try:
            self.layout_store.set(s.target_widget_id, s.position, s.widget_size)
        except StoreWriteError as e:
            # board keeps the dragged position; no retry
            print(f"[Drag] commit of {s.target_widget_id!r} failed: {e}")
        return layout
