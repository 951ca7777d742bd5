from __future__ import annotations

from typing import Any, Dict, List

from mirrorpinch.core.config import (
    APP_DEFAULT_SETTINGS, HANDTRACKING_APP_ID, PREVIEW_APP_ID,
    WIDGETS, HandTrackingSettings, WidgetSpec,
)
from mirrorpinch.store.settings_store import SettingsStore

SETTINGS_KEY = "smartMirrorSettings"


def _all(store: SettingsStore) -> Dict[str, Any]:
    raw = store.get(SETTINGS_KEY, {})
    if not isinstance(raw, dict):
        print(f"[Settings] {SETTINGS_KEY} is not an object; ignoring it")
        return {}
    return raw


def get_app_settings(store: SettingsStore, app_id: str) -> Dict[str, Any]:
    """Defaults for the app, overlaid with whatever has been saved."""
    saved = _all(store).get(app_id) or {}
    return {**APP_DEFAULT_SETTINGS.get(app_id, {}), **(saved.get("settings") or {})}


def save_app_settings(store: SettingsStore, app_id: str, new_settings: Dict[str, Any]) -> None:
    # merge into what is on disk now, not into this process's last view of it
    store.refresh(SETTINGS_KEY)
    settings = _all(store)
    entry = settings.setdefault(app_id, {})
    entry["settings"] = {**(entry.get("settings") or {}), **new_settings}
    store.set(SETTINGS_KEY, settings)


def toggle_app_enabled(store: SettingsStore, app_id: str, enabled: bool) -> None:
    store.refresh(SETTINGS_KEY)
    settings = _all(store)
    settings.setdefault(app_id, {})["enabled"] = bool(enabled)
    store.set(SETTINGS_KEY, settings)


def is_app_enabled(store: SettingsStore, app_id: str) -> bool:
    return (_all(store).get(app_id) or {}).get("enabled") is not False


def load_hand_tracking_settings(store: SettingsStore) -> HandTrackingSettings:
    return HandTrackingSettings.from_dict(get_app_settings(store, HANDTRACKING_APP_ID))


def visible_widgets(store: SettingsStore) -> List[WidgetSpec]:
    show_preview = load_hand_tracking_settings(store).show_preview
    out = []
    for w in WIDGETS:
        if w.background or not is_app_enabled(store, w.id):
            continue
        if w.id == PREVIEW_APP_ID and not show_preview:
            continue
        out.append(w)
    return out
