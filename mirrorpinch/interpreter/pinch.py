from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mirrorpinch.core.types import CursorState, GestureState


class Transition(str, Enum):
    NONE = "NONE"
    STARTED = "STARTED"    # IDLE -> DRAGGING
    HELD = "HELD"          # still DRAGGING
    ENDED = "ENDED"        # DRAGGING -> IDLE


@dataclass
class PinchStateMachine:
    """
    IDLE <-> DRAGGING.

    A drag starts only on the frame where the pinch begins (rising edge)
    and only if a widget is under the cursor at that instant. Pinching
    over empty space and sliding onto a widget does nothing until the
    pinch is released and made again.
    A drag ends as soon as the pinch opens or the hand is lost.
    """
    state: GestureState = GestureState.IDLE
    _was_pinching: bool = False

    def update(self, cursor: CursorState, target_id: Optional[str]) -> Transition:
        pinching = cursor.detected and cursor.is_pinching
        rising = pinching and not self._was_pinching
        self._was_pinching = pinching

        if self.state == GestureState.DRAGGING:
            if pinching:
                return Transition.HELD
            self.state = GestureState.IDLE
            return Transition.ENDED

        if rising and target_id is not None:
            self.state = GestureState.DRAGGING
            return Transition.STARTED
        return Transition.NONE

    def refuse(self) -> None:
        # the drag could not start; this pinch stays spent until released
        self.state = GestureState.IDLE

    def force_idle(self) -> Transition:
        self._was_pinching = False
        if self.state == GestureState.DRAGGING:
            self.state = GestureState.IDLE
            return Transition.ENDED
        return Transition.NONE
