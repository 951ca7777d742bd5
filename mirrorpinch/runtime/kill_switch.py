from __future__ import annotations

from dataclasses import dataclass

from mirrorpinch.core.control import ControlState
from mirrorpinch.interpreter.engine import GestureEngine


@dataclass
class KillSwitch:
    """
    Central safety gate for the hand channel.
    When ControlState goes OFF we synchronously:
      - commit and drop any drag the hand is holding
      - clear focus and hide the cursor
    The pointer channel is never touched.
    """
    state: ControlState
    engine: GestureEngine

    _last_enabled: bool | None = None

    def guard(self) -> bool:
        enabled = self.state.is_enabled()
        if enabled == self._last_enabled:
            return enabled

        self._last_enabled = enabled
        if not enabled:
            committed = self.engine.set_enabled(False)
            if committed is not None:
                print(f"[mirrorpinch] OFF: released {committed.id!r} at ({committed.position.x:.0f}, {committed.position.y:.0f})")
            else:
                print("[mirrorpinch] OFF")
        else:
            self.engine.set_enabled(True)
            print("[mirrorpinch] ON")
        return enabled

    def shutdown(self) -> None:
        # never leave a drag dangling on exit
        self.engine.set_enabled(False)
        self._last_enabled = False
