from __future__ import annotations

import json
import os
import time
from pathlib import Path

import cv2

from mirrorpinch.core.config import DEFAULT_PRESET, DISPLAY_SIZE, PRESETS, PresetName, WIDGETS_BY_ID, Preset
from mirrorpinch.core.control import ControlState
from mirrorpinch.core.types import Size
from mirrorpinch.interpreter.board import WidgetBoard
from mirrorpinch.interpreter.engine import GestureEngine
from mirrorpinch.pointer.mouse_drag import PointerDragChannel
from mirrorpinch.runtime.calibration import Calibrator, save_calibration
from mirrorpinch.runtime.kill_switch import KillSwitch
from mirrorpinch.sensor.webcam_mp import WebcamMPSrc
from mirrorpinch.store.app_settings import SETTINGS_KEY, load_hand_tracking_settings, visible_widgets
from mirrorpinch.store.layout_store import LayoutStore
from mirrorpinch.store.settings_store import JsonFileBackend, SettingsStore, StoreWriteError
from mirrorpinch.ui.overlay import blank_canvas, cursor_indicator, draw_board, draw_cursor

WINDOW = "mirrorpinch"


def _default_feel_log_path() -> str:
    outdir = Path.home() / ".cache" / "mirrorpinch" / "feel_logs"
    outdir.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y%m%d_%H%M%S")
    return str(outdir / f"feel_{ts}.jsonl")


def _attach_pointer(pointer: PointerDragChannel, viewport: Size) -> None:
    # press picks move or resize (bottom-right grip); release saves either
    def on_mouse(event, x, y, flags, param):
        if event == cv2.EVENT_LBUTTONDOWN:
            pointer.press(x, y, viewport)
        elif event == cv2.EVENT_MOUSEMOVE:
            pointer.move(x, y, viewport)
        elif event == cv2.EVENT_LBUTTONUP:
            pointer.release()

    cv2.setMouseCallback(WINDOW, on_mouse)


def main(viewport: Size = DISPLAY_SIZE, preset: Preset = DEFAULT_PRESET, feel_log: bool = False):
    store = SettingsStore(JsonFileBackend())
    state = ControlState(store=store)

    layouts = LayoutStore(store)
    board = WidgetBoard(layouts, [w.id for w in visible_widgets(store)], viewport)
    engine = GestureEngine(board, layouts, load_hand_tracking_settings(store), preset)
    ks = KillSwitch(state=state, engine=engine)
    pointer = PointerDragChannel(board, layouts)
    names = {wid: spec.name for wid, spec in WIDGETS_BY_ID.items()}

    def on_settings(key, value):
        if key != SETTINGS_KEY:
            return
        engine.configure(load_hand_tracking_settings(store))
        # widgets switched on/off (or the preview panel) come and go
        visible = [w.id for w in visible_widgets(store)]
        for wid in visible:
            if board.get(wid) is None:
                board.place(layouts.get(wid))
        for layout in board.layouts():
            if layout.id not in visible:
                board.remove(layout.id)

    store.subscribe(on_settings)

    cal = Calibrator()
    calibrating = False

    src = WebcamMPSrc(cam_index=0)
    if not src.available:
        print("[mirrorpinch] camera unavailable; hand control off, mouse still works")

    cv2.namedWindow(WINDOW)
    _attach_pointer(pointer, viewport)

    print("[mirrorpinch] Webcam runtime. ESC to quit, 'c' to calibrate pinch.")
    feel_path = os.environ.get("FEEL_LOG_PATH")
    _feel_f = None
    if feel_log or feel_path:
        feel_path = feel_path or _default_feel_log_path()
        Path(feel_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        _feel_f = open(feel_path, "a", buffering=1)
        print(f"[FeelLog] writing {feel_path}")

    try:
        while True:
            state.sync()
            ks.guard()

            t_ms = int(time.time() * 1000)
            hf, dbg = src.read()
            # no frame from the camera is the same as no hand
            res = engine.process(hf, viewport)

            if _feel_f is not None:
                c = res.cursor
                rec = {
                    "t_ms": t_ms,
                    "detected": c.detected,
                    "x": round(c.x, 1),
                    "y": round(c.y, 1),
                    "pinching": c.is_pinching,
                    "pinch_d": round(c.pinch_distance, 4),
                    "state": res.gesture_state.value,
                    "focus": res.focused_widget_id,
                    "drag": res.dragging_widget_id,
                    "committed": res.committed.id if res.committed else None,
                }
                _feel_f.write(json.dumps(rec) + "\n")

            canvas = blank_canvas(viewport)
            draw_board(canvas, board.layouts(), names, res.focused_widget_id, board.dragging())
            draw_cursor(canvas, cursor_indicator(res.cursor))

            if calibrating:
                cal.update(res.cursor, t_ms)
                cv2.putText(canvas, cal.instruction(), (12, int(viewport.height) - 20),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.6, (200, 200, 200), 2)
                if cal.done:
                    r = cal.finalize(engine.settings.pinch_sensitivity)
                    try:
                        save_calibration(store, r)
                    except StoreWriteError as e:
                        print(f"[Calibration] could not save: {e}")
                    print("[Calibration] pinchSensitivity =", round(r.pinch_sensitivity, 3))
                    calibrating = False

            preview = board.get("handtracking_preview")
            if preview is not None and dbg is not None:
                x, y = int(preview.position.x), int(preview.position.y)
                w, h = int(preview.size.width), int(preview.size.height)
                if x >= 0 and y >= 0 and y + h <= canvas.shape[0] and x + w <= canvas.shape[1]:
                    canvas[y:y + h, x:x + w] = cv2.resize(dbg, (w, h))

            cv2.imshow(WINDOW, canvas)
            key = cv2.waitKey(1) & 0xFF
            if key == 27:  # ESC
                break
            if key in (ord('c'), ord('C')):
                calibrating = True
                cal.start(t_ms)
    finally:
        pointer.release()
        ks.shutdown()
        board.close()
        src.close()
        if _feel_f is not None:
            _feel_f.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main(preset=PRESETS[PresetName(os.environ.get("MIRRORPINCH_PRESET", "Default"))])
