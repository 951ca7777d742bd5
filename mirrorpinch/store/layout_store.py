from __future__ import annotations

from typing import Any, Callable, Optional

from mirrorpinch.core.config import DEFAULT_WIDGET_SIZE, WIDGETS_BY_ID
from mirrorpinch.core.types import Point, Size, WidgetLayout
from mirrorpinch.store.settings_store import SettingsStore

LayoutListener = Callable[[str, WidgetLayout], None]

_PREFIX = "smartMirror_"
_SUFFIX = "_layout"


def layout_key(widget_id: str) -> str:
    return f"{_PREFIX}{widget_id}{_SUFFIX}"


def widget_id_from_key(key: str) -> Optional[str]:
    if key.startswith(_PREFIX) and key.endswith(_SUFFIX) and len(key) > len(_PREFIX) + len(_SUFFIX):
        return key[len(_PREFIX):-len(_SUFFIX)]
    return None


def default_layout(widget_id: str) -> WidgetLayout:
    spec = WIDGETS_BY_ID.get(widget_id)
    if spec is None:
        return WidgetLayout(id=widget_id, position=Point(0, 0), size=DEFAULT_WIDGET_SIZE)
    return WidgetLayout(
        id=widget_id,
        position=spec.default_position,
        size=spec.default_size,
        z_order=spec.z_order,
    )


def _parse(widget_id: str, raw: Any) -> Optional[WidgetLayout]:
    base = default_layout(widget_id)
    try:
        pos = raw.get("position") or {}
        size = raw.get("size") or {}
        return WidgetLayout(
            id=widget_id,
            position=Point(float(pos.get("x", base.position.x)), float(pos.get("y", base.position.y))),
            size=Size(float(size.get("width", base.size.width)), float(size.get("height", base.size.height))),
            z_order=base.z_order,
        )
    except (AttributeError, TypeError, ValueError):
        return None


class LayoutStore:
    """
    Per-widget position + size, kept in the shared settings store.

    Both the gesture channel and the pointer channel write here under the
    same keys; whichever write lands last wins and is broadcast to every
    subscriber.
    """

    def __init__(self, settings: SettingsStore) -> None:
        self.settings = settings

    def get(self, widget_id: str) -> WidgetLayout:
        raw = self.settings.get(layout_key(widget_id))
        if raw is None:
            return default_layout(widget_id)
        layout = _parse(widget_id, raw)
        if layout is None:
            print(f"[Store] malformed layout for {widget_id!r}: {raw!r}; using default")
            return default_layout(widget_id)
        return layout

    def set(self, widget_id: str, position: Point, size: Size) -> None:
        self.settings.set(layout_key(widget_id), {
            "position": {"x": position.x, "y": position.y},
            "size": {"width": size.width, "height": size.height},
        })

    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        def on_change(key: str, value: Any) -> None:
            widget_id = widget_id_from_key(key)
            if widget_id is None:
                return
            listener(widget_id, self.get(widget_id))

        return self.settings.subscribe(on_change)
