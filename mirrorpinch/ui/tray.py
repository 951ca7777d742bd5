from __future__ import annotations

import threading
import time

import pystray
from PIL import Image, ImageDraw

from mirrorpinch.core.control import ControlState
from mirrorpinch.store.settings_store import StoreWriteError
from mirrorpinch.ui.overlay import ACCENT_HEX

WATCH_INTERVAL_S = 0.2


def _accent_rgba(alpha: int):
    v = int(ACCENT_HEX.lstrip("#"), 16)
    return ((v >> 16) & 255, (v >> 8) & 255, v & 255, alpha)


def _make_icon(enabled: bool) -> Image.Image:
    # the on-screen cursor ring; solid center while hand control is on
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    d.ellipse((14, 14, 50, 50), outline=_accent_rgba(230), width=4)
    d.ellipse((27, 27, 37, 37), fill=_accent_rgba(255) if enabled else (255, 255, 255, 70))
    return img


def run_tray(state: ControlState, stop_flag: threading.Event) -> None:
    icon = pystray.Icon("mirrorpinch")

    def refresh(enabled: bool):
        icon.icon = _make_icon(enabled)
        icon.title = f"mirrorpinch: hand control {'on' if enabled else 'off'}"
        icon.update_menu()

    def on_hand_control(_icon, _item):
        try:
            state.toggle()
        except StoreWriteError as e:
            print(f"[mirrorpinch] {e}")
        refresh(state.is_enabled())

    def on_preview(_icon, _item):
        try:
            state.toggle_preview()
        except StoreWriteError as e:
            print(f"[mirrorpinch] {e}")
        icon.update_menu()

    def on_quit(_icon, _item):
        stop_flag.set()
        icon.stop()

    icon.menu = pystray.Menu(
        pystray.MenuItem("Hand control", on_hand_control, checked=lambda _item: state.is_enabled()),
        pystray.MenuItem("Camera preview", on_preview, checked=lambda _item: state.is_preview_shown()),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Quit", on_quit),
    )
    refresh(state.is_enabled())

    # hotkeys and the runtime write the same settings file
    def watcher():
        last = None
        while not stop_flag.is_set():
            state.sync()
            cur = state.is_enabled()
            if cur != last:
                refresh(cur)
                last = cur
            time.sleep(WATCH_INTERVAL_S)

    threading.Thread(target=watcher, daemon=True).start()
    try:
        icon.run()
    except Exception as e:
        # a broken tray backend leaves the hotkeys running
        print(f"[mirrorpinch] tray backend crashed: {e}")
        stop_flag.set()
