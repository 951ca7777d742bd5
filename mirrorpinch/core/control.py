from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock

from mirrorpinch.core.config import HANDTRACKING_APP_ID
from mirrorpinch.store.app_settings import SETTINGS_KEY, load_hand_tracking_settings, save_app_settings
from mirrorpinch.store.settings_store import SettingsStore


@dataclass
class ControlState:
    """
    Shared on/off switch for the hand channel.
    Backed by the hand-tracking `enabled` setting, so every instance
    reading the same store agrees on it.
    enabled=False means the engine must drop any drag it holds.
    """
    store: SettingsStore
    _lock: Lock = field(default_factory=Lock)

    def is_enabled(self) -> bool:
        with self._lock:
            return load_hand_tracking_settings(self.store).enabled

    def set_enabled(self, value: bool) -> None:
        with self._lock:
            save_app_settings(self.store, HANDTRACKING_APP_ID, {"enabled": bool(value)})

    def toggle(self) -> bool:
        with self._lock:
            self.store.refresh(SETTINGS_KEY)
            enabled = not load_hand_tracking_settings(self.store).enabled
            save_app_settings(self.store, HANDTRACKING_APP_ID, {"enabled": enabled})
            return enabled

    def sync(self):
        """Pick up writes from other processes (hotkeys, tray, another mirror)."""
        with self._lock:
            return self.store.reload()

    def is_preview_shown(self) -> bool:
        with self._lock:
            return load_hand_tracking_settings(self.store).show_preview

    def toggle_preview(self) -> bool:
        # the preview panel is a widget; the runtime adds or removes it on this change
        with self._lock:
            self.store.refresh(SETTINGS_KEY)
            shown = not load_hand_tracking_settings(self.store).show_preview
            save_app_settings(self.store, HANDTRACKING_APP_ID, {"showPreview": shown})
            return shown
