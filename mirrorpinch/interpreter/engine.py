from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mirrorpinch.core.config import DEFAULT_PRESET, HandTrackingSettings, Preset
from mirrorpinch.core.smoothing import CursorSmoother
from mirrorpinch.core.types import (
    LOST_CURSOR, Channel, CursorState, DragSession, FrameResult,
    GestureState, LandmarkFrame, Size, WidgetLayout,
)
from mirrorpinch.interpreter.board import WidgetBoard
from mirrorpinch.interpreter.drag import DragSessionManager
from mirrorpinch.interpreter.hit_test import widget_at
from mirrorpinch.interpreter.normalizer import normalize
from mirrorpinch.interpreter.pinch import PinchStateMachine, Transition
from mirrorpinch.store.layout_store import LayoutStore


@dataclass
class EngineState:
    """Everything the engine remembers between frames."""
    gesture_state: GestureState = GestureState.IDLE
    active_session: Optional[DragSession] = None
    focused_widget_id: Optional[str] = None
    last_cursor: CursorState = LOST_CURSOR


class GestureEngine:
    """
    Frame-driven hand channel.

    Each frame runs to completion in order: normalize -> pinch state
    machine -> hit test -> drag update -> (on release) layout store commit.
    Nothing here blocks or yields.
    """

    def __init__(
        self,
        board: WidgetBoard,
        layout_store: LayoutStore,
        settings: HandTrackingSettings = HandTrackingSettings(enabled=True),
        preset: Preset = DEFAULT_PRESET,
    ) -> None:
        self.board = board
        self.preset = preset
        self.settings = settings
        self.enabled = settings.enabled

        self.state = EngineState()
        self._pinch = PinchStateMachine()
        self._drag = DragSessionManager(board, layout_store, Channel.GESTURE)
        self._smoother = CursorSmoother(preset.cursor_filter, settings.smoothing)

    # ---------------------- configuration ----------------------

    def configure(self, settings: HandTrackingSettings) -> Optional[WidgetLayout]:
        """Apply new settings. Turning the channel off commits any drag in flight."""
        committed = None
        if settings.smoothing != self.settings.smoothing:
            self._smoother = CursorSmoother(self.preset.cursor_filter, settings.smoothing)
        self.settings = settings
        if settings.enabled != self.enabled:
            committed = self.set_enabled(settings.enabled)
        return committed

    def set_enabled(self, enabled: bool) -> Optional[WidgetLayout]:
        self.enabled = enabled
        if enabled:
            return None
        self._pinch.force_idle()
        committed = self._end_drag()
        self._smoother.reset()
        self.state.focused_widget_id = None
        self.state.last_cursor = LOST_CURSOR
        return committed

    # ---------------------- per frame ----------------------

    def process(self, frame: Optional[LandmarkFrame], viewport: Size) -> FrameResult:
        if frame is None or not self.enabled:
            return self.step(LOST_CURSOR, viewport)

        cursor = normalize(
            frame.landmarks,
            viewport,
            pinch_threshold=self.settings.pinch_sensitivity,
            calibration=self.preset.calibration,
        )
        cursor = self._smoother.apply(cursor, frame.t_ms)
        return self.step(cursor, viewport)

    def step(self, cursor: CursorState, viewport: Size) -> FrameResult:
        if not self.enabled:
            cursor = LOST_CURSOR

        hover = widget_at(cursor.point, self.board.layouts()) if cursor.detected else None

        # a widget held by the pointer channel cannot be grabbed by the hand
        target = hover
        if target is not None and self.board.holder(target) not in (None, Channel.GESTURE):
            target = None

        transition = self._pinch.update(cursor, target)
        committed = None

        if transition == Transition.STARTED:
            assert target is not None
            if self._drag.begin(target, cursor.point) is None:
                self._pinch.refuse()
            else:
                self._drag.update(cursor.point, viewport)
        elif transition == Transition.HELD:
            self._drag.update(cursor.point, viewport)
        elif transition == Transition.ENDED:
            committed = self._end_drag()

        st = self.state
        st.gesture_state = self._pinch.state
        st.active_session = self._drag.session
        # a finished drag always leaves the frame without focus
        st.focused_widget_id = None if transition == Transition.ENDED else hover
        st.last_cursor = cursor

        return FrameResult(
            cursor=cursor,
            gesture_state=st.gesture_state,
            focused_widget_id=st.focused_widget_id,
            dragging_widget_id=st.active_session.target_widget_id if st.active_session else None,
            committed=committed,
        )

    def _end_drag(self) -> Optional[WidgetLayout]:
        committed = self._drag.end()
        self.state.gesture_state = self._pinch.state
        self.state.active_session = None
        return committed
