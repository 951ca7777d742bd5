from __future__ import annotations

import threading
import time

from mirrorpinch.core.control import ControlState
from mirrorpinch.store.settings_store import JsonFileBackend, SettingsStore
from mirrorpinch.ui.hotkeys import bindings, run_hotkeys
try:
    from mirrorpinch.ui.tray import run_tray
except Exception as e:
    print(f"[mirrorpinch] tray unavailable: {e}")
    run_tray = None


def main():
    """
    Hand-control switch for the running mirror.

    Writes the hand-tracking settings in the shared settings file; the
    runtime polls that file and reacts (kill switch, preview panel).
    """
    state = ControlState(store=SettingsStore(JsonFileBackend()))
    stop = threading.Event()

    threading.Thread(target=run_hotkeys, args=(state,), daemon=True).start()

    print(f"[mirrorpinch] control daemon on {state.store.backend.path}")
    print(f"  hand control is {'ON' if state.is_enabled() else 'OFF'}")
    for _, label, _ in bindings(state):
        print(f"   - {label}")

    if run_tray is not None:
        try:
            threading.Thread(target=run_tray, args=(state, stop), daemon=True).start()
        except Exception as e:
            print(f"[mirrorpinch] tray failed: {e}. Hotkeys only.")

    try:
        while not stop.is_set():
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\n[mirrorpinch] exiting")
    finally:
        stop.set()


if __name__ == "__main__":
    main()
