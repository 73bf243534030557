from __future__ import annotations

import json
import logging
import os
import threading

from msal_extensions import FilePersistence, FilePersistenceWithDataProtection
from msal_extensions.persistence import PersistenceNotFound

logger = logging.getLogger(__name__)

SIDEBAR_OPEN_KEY = "sidebar_open"


class LocalStorage:
    """String key/value store persisted to a single file.

    Plays the role a browser's localStorage plays for a web admin panel:
    values survive restarts of the application. On Windows the file is
    encrypted with DPAPI; elsewhere it is a plain file in the user's profile.
    """

    def __init__(self, persistence):
        self._persistence = persistence
        self._lock = threading.Lock()

    @classmethod
    def from_path(cls, path: str) -> "LocalStorage":
        return cls(cls._build_persistence(path))

    @staticmethod
    def _build_persistence(path: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            return FilePersistenceWithDataProtection(path)
        except Exception:
            return FilePersistence(path)

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = str(value)
            self._write(data)

    def remove_item(self, key: str) -> None:
        self.remove_items(key)

    def remove_items(self, *keys: str) -> None:
        with self._lock:
            data = self._read()
            changed = False
            for key in keys:
                if key in data:
                    del data[key]
                    changed = True
            if changed:
                self._write(data)

    def _read(self) -> dict[str, str]:
        try:
            raw = self._persistence.load()
        except PersistenceNotFound:
            return {}

        if not raw:
            return {}

        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable storage file at %s", self._persistence.get_location())
            return {}

        if not isinstance(parsed, dict):
            return {}
        return {str(key): str(value) for key, value in parsed.items()}

    def _write(self, data: dict[str, str]) -> None:
        self._persistence.save(json.dumps(data))


class UiPreferences:
    def __init__(self, storage: LocalStorage):
        self._storage = storage

    def is_sidebar_open(self, default: bool = True) -> bool:
        stored = self._storage.get_item(SIDEBAR_OPEN_KEY)
        if stored is None:
            return default
        return stored == "true"

    def set_sidebar_open(self, is_open: bool) -> None:
        self._storage.set_item(SIDEBAR_OPEN_KEY, "true" if is_open else "false")
