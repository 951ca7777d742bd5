from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Tuple

from mirrorpinch.core.config import DEFAULT_PRESET, DISPLAY_SIZE
from mirrorpinch.core.control import ControlState
from mirrorpinch.core.types import LandmarkFrame, Vec3
from mirrorpinch.interpreter.board import WidgetBoard
from mirrorpinch.interpreter.engine import GestureEngine
from mirrorpinch.runtime.kill_switch import KillSwitch
from mirrorpinch.store.app_settings import load_hand_tracking_settings, visible_widgets
from mirrorpinch.store.layout_store import LayoutStore
from mirrorpinch.store.settings_store import JsonFileBackend, SettingsStore


def fake_hand(cx: float, cy: float, gap: float, span: float = 0.12) -> Tuple[Vec3, ...]:
    """
    A flat, upright 21-landmark hand in camera space.

    (cx, cy) is the thumb/index midpoint, gap the thumb-index tip distance,
    span the rough hand height. All normalized.
    """
    wrist = (cx, cy + span)
    pts = [(wrist[0], wrist[1], 0.0)]
    # thumb, index, middle, ring, pinky: each 4 joints fanning upward
    for f, dx in enumerate((-0.5, -0.2, 0.0, 0.2, 0.4)):
        for j in range(1, 5):
            t = j / 4.0
            pts.append((wrist[0] + dx * span * t, wrist[1] - span * t, 0.0))
    # place the two tips around the midpoint
    pts[4] = (cx - gap / 2.0, cy, 0.0)
    pts[8] = (cx + gap / 2.0, cy, 0.0)
    return tuple(pts)


@dataclass
class FakeSource:
    """
    Deterministic fake hand to validate runtime wiring.
    Sweeps across the clock widget while pinched for 2s, open for 2s.
    """
    start_ms: int

    def frame(self, t_ms: int) -> LandmarkFrame:
        dt = (t_ms - self.start_ms) / 1000.0
        pinch_on = int(dt) % 4 in (0, 1)

        if pinch_on:
            phase = (dt % 2.0) / 2.0
            # mirrored: camera x goes down so the cursor goes right
            x = 0.85 - 0.3 * phase
        else:
            x = 0.85
        y = 0.12
        return LandmarkFrame(t_ms=t_ms, landmarks=fake_hand(x, y, gap=0.005 if pinch_on else 0.08))


def run():
    store = SettingsStore(JsonFileBackend())
    state = ControlState(store=store)
    state.set_enabled(True)

    layouts = LayoutStore(store)
    board = WidgetBoard(layouts, [w.id for w in visible_widgets(store)], DISPLAY_SIZE)
    engine = GestureEngine(board, layouts, load_hand_tracking_settings(store), DEFAULT_PRESET)
    ks = KillSwitch(state=state, engine=engine)

    src = FakeSource(start_ms=int(time.time() * 1000))

    print("[mirrorpinch] Runtime loop (FAKE SOURCE). Ctrl+C to exit.")
    print("Tip: run the control daemon in another terminal to toggle ON/OFF.")

    last = None
    try:
        while True:
            t_ms = int(time.time() * 1000)

            # pick up toggles written by the daemon
            state.sync()
            ks.guard()

            res = engine.process(src.frame(t_ms), DISPLAY_SIZE)
            key = (res.gesture_state, res.focused_widget_id, res.dragging_widget_id)
            if key != last:
                print(f"[mirrorpinch] {res.gesture_state.value} focus={res.focused_widget_id} drag={res.dragging_widget_id}")
                last = key
            if res.committed is not None:
                c = res.committed
                print(f"[mirrorpinch] committed {c.id} at ({c.position.x:.0f}, {c.position.y:.0f})")

            time.sleep(0.016)  # ~60Hz loop
    except KeyboardInterrupt:
        print("\n[mirrorpinch] exiting")
    finally:
        ks.shutdown()
        board.close()


if __name__ == "__main__":
    run()
