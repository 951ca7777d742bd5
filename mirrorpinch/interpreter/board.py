from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from mirrorpinch.core.types import Channel, Point, Size, WidgetLayout, clamp
from mirrorpinch.store.layout_store import LayoutStore


def clamp_position(candidate: Point, widget: Size, container: Size) -> Point:
    # keep the whole widget on screen; a widget wider than the container pins to 0
    return Point(
        max(0.0, clamp(candidate.x, 0.0, container.width - widget.width)),
        max(0.0, clamp(candidate.y, 0.0, container.height - widget.height)),
    )


class WidgetBoard:
    """
    Live layouts of the widgets currently on the surface.

    This is what the renderer draws and what hit tests run against. Drags
    move widgets here every frame; the layout store only sees the final
    position. Store notifications (from any channel or instance) are
    applied as they arrive, last write wins.

    With a viewport, every layout that lands on the board (loaded, placed
    or broadcast) is pulled fully on screen. The stored value is left as
    it is until a channel commits a new one.

    Each widget can be held by at most one channel at a time.
    """

    def __init__(
        self,
        layout_store: LayoutStore,
        widget_ids: Iterable[str],
        viewport: Optional[Size] = None,
    ) -> None:
        self.layout_store = layout_store
        self.viewport = viewport
        self._layouts: Dict[str, WidgetLayout] = {}
        self._holders: Dict[str, Channel] = {}
        for widget_id in widget_ids:
            self._layouts[widget_id] = self._fit(layout_store.get(widget_id))
        self._unsubscribe = layout_store.subscribe(self._on_store_change)

    def close(self) -> None:
        self._unsubscribe()

    # insertion order is the tie-break order for hit tests
    def layouts(self) -> List[WidgetLayout]:
        return list(self._layouts.values())

    def get(self, widget_id: str) -> Optional[WidgetLayout]:
        return self._layouts.get(widget_id)

    def place(self, layout: WidgetLayout) -> None:
        """Put a widget on the board (or replace it). New widgets go on top of equal z."""
        self._layouts[layout.id] = self._fit(layout)

    def remove(self, widget_id: str) -> None:
        self._layouts.pop(widget_id, None)
        self._holders.pop(widget_id, None)

    def move(self, widget_id: str, position: Point) -> Optional[WidgetLayout]:
        current = self._layouts.get(widget_id)
        if current is None:
            return None
        layout = replace(current, position=position)
        self._layouts[widget_id] = layout
        return layout

    def resize(self, widget_id: str, size: Size) -> Optional[WidgetLayout]:
        current = self._layouts.get(widget_id)
        if current is None:
            return None
        layout = replace(current, size=size)
        self._layouts[widget_id] = layout
        return layout

    # ---------------------- channel ownership ----------------------

    def holder(self, widget_id: str) -> Optional[Channel]:
        return self._holders.get(widget_id)

    def claim(self, widget_id: str, channel: Channel) -> bool:
        current = self._holders.get(widget_id)
        if current is not None and current != channel:
            return False
        self._holders[widget_id] = channel
        return True

    def release(self, widget_id: str, channel: Channel) -> None:
        if self._holders.get(widget_id) == channel:
            del self._holders[widget_id]

    def dragging(self) -> Dict[str, Channel]:
        return dict(self._holders)

    def _fit(self, layout: WidgetLayout) -> WidgetLayout:
        if self.viewport is None:
            return layout
        position = clamp_position(layout.position, layout.size, self.viewport)
        if position == layout.position:
            return layout
        return replace(layout, position=position)

    def _on_store_change(self, widget_id: str, layout: WidgetLayout) -> None:
        current = self._layouts.get(widget_id)
        if current is not None:
            # stacking is a property of the board, not of the stored layout
            self._layouts[widget_id] = self._fit(replace(layout, z_order=current.z_order))
