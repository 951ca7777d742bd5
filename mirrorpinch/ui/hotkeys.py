from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from pynput import keyboard

from mirrorpinch.core.control import ControlState
from mirrorpinch.store.settings_store import StoreWriteError


def _saving(action: Callable[[], None]) -> Callable[[], None]:
    # the listener thread must survive a read-only settings file
    def run():
        try:
            action()
        except StoreWriteError as e:
            print(f"[mirrorpinch] {e}")
    return run


def bindings(state: ControlState) -> List[Tuple[str, str, Callable[[], None]]]:
    """(pynput chord, label, action) for every global hotkey."""

    def toggle():
        enabled = state.toggle()
        print(f"[mirrorpinch] hand control {'ON' if enabled else 'OFF'}")

    def off():
        state.set_enabled(False)
        print("[mirrorpinch] hand control OFF")

    def preview():
        shown = state.toggle_preview()
        print(f"[mirrorpinch] camera preview {'shown' if shown else 'hidden'}")

    return [
        ("<ctrl>+<alt>+h", "Ctrl+Alt+H   = Toggle hand control", _saving(toggle)),
        ("<ctrl>+<alt>+<esc>", "Ctrl+Alt+Esc = Hand control OFF", _saving(off)),
        ("<ctrl>+<alt>+p", "Ctrl+Alt+P   = Show/hide camera preview", _saving(preview)),
    ]


def run_hotkeys(state: ControlState) -> None:
    """Blocks listening for global hotkeys (X11)."""
    hotkeys: Dict[str, Callable[[], None]] = {chord: action for chord, _, action in bindings(state)}
    with keyboard.GlobalHotKeys(hotkeys) as listener:
        listener.join()
