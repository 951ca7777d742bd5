"""
Key-value settings store with change notification.

This is the one piece of state shared by every input channel and by
other instances of the mirror. Writes are last-write-wins: the store
keeps whatever arrived last and tells every subscriber about it.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

Listener = Callable[[str, Any], None]


class StoreWriteError(RuntimeError):
    """The persistence backend refused a write. In-memory state is already updated."""


class MemoryBackend:
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = copy.deepcopy(initial or {})

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def save_key(self, key: str, value: Any) -> None:
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = copy.deepcopy(value)


def default_settings_path() -> Path:
    env = os.environ.get("MIRRORPINCH_SETTINGS")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".config" / "mirrorpinch" / "settings.json"


class JsonFileBackend:
    """Whole-store JSON file, shared between processes on the same machine."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def save_key(self, key: str, value: Any) -> None:
        # read-modify-write one key so other processes' keys survive
        data = self.load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2))
        tmp.replace(self.path)


class SettingsStore:
    def __init__(self, backend=None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        self._listeners: List[Listener] = []
        # keys whose last write never reached the backend; local value wins
        self._unsaved: Set[str] = set()
        self._last_load_error: Optional[str] = None
        self._cache: Dict[str, Any] = self._load() or {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._cache:
            return default
        return copy.deepcopy(self._cache[key])

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._cache)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, key: str, value: Any) -> None:
        """
        Store `value` under `key`, notify subscribers, then persist.

        Raises StoreWriteError if the backend fails; the new value stays
        visible to this process either way.
        """
        if value is None:
            self.remove(key)
            return
        self._cache[key] = copy.deepcopy(value)
        self._notify(key, value)
        self._persist(key)

    def remove(self, key: str) -> None:
        if key not in self._cache:
            return
        del self._cache[key]
        self._notify(key, None)
        self._persist(key)

    def reload(self) -> List[str]:
        """Pick up writes made by other processes. Returns the changed keys."""
        fresh = self._load()
        if fresh is None:
            return []
        changed = [k for k in fresh if self._cache.get(k) != fresh[k]]
        changed += [k for k in self._cache if k not in fresh]
        changed = [k for k in changed if k not in self._unsaved]
        for k in changed:
            if k in fresh:
                self._cache[k] = fresh[k]
            else:
                del self._cache[k]
        for k in changed:
            self._notify(k, copy.deepcopy(fresh.get(k)))
        return changed

    def refresh(self, key: str) -> bool:
        """
        Re-read one key from the backend before a read-modify-write of it.

        Returns True if another writer had changed it. A key whose last local
        write never reached the backend keeps the local value.
        """
        fresh = self._load()
        if fresh is None or key in self._unsaved:
            return False
        if self._cache.get(key) == fresh.get(key):
            return False
        if key in fresh:
            self._cache[key] = fresh[key]
        else:
            self._cache.pop(key, None)
        self._notify(key, copy.deepcopy(fresh.get(key)))
        return True

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(key, copy.deepcopy(value))

    def _load(self) -> Optional[Dict[str, Any]]:
        try:
            data = self.backend.load()
        except (OSError, ValueError) as e:
            msg = str(e)
            if msg != self._last_load_error:
                print(f"[Store] failed to load settings: {msg}; keeping what we have")
                self._last_load_error = msg
            return None
        self._last_load_error = None
        return data

    def _persist(self, key: str) -> None:
        try:
            self.backend.save_key(key, self._cache.get(key))
        except (OSError, ValueError) as e:
            self._unsaved.add(key)
            raise StoreWriteError(f"could not persist {key!r}: {e}") from e
        self._unsaved.discard(key)
