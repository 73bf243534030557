from __future__ import annotations

import threading

from yolyolakay_admin.storage import LocalStorage

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class SessionStore:
    """Holds the current access/refresh token pair.

    Tokens are read from durable storage once at construction and written
    through on every change. Only login, refresh and logout write here.
    """

    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._lock = threading.Lock()
        self._access_token = storage.get_item(ACCESS_TOKEN_KEY)
        self._refresh_token = storage.get_item(REFRESH_TOKEN_KEY)

    def get_access_token(self) -> str | None:
        with self._lock:
            return self._access_token

    def get_refresh_token(self) -> str | None:
        with self._lock:
            return self._refresh_token

    def is_authenticated(self) -> bool:
        return bool(self.get_access_token())

    def set_tokens(self, access: str, refresh: str | None = None) -> None:
        with self._lock:
            self._access_token = access
            self._storage.set_item(ACCESS_TOKEN_KEY, access)
            if refresh is not None:
                self._refresh_token = refresh
                self._storage.set_item(REFRESH_TOKEN_KEY, refresh)

    def clear(self) -> None:
        with self._lock:
            self._access_token = None
            self._refresh_token = None
            self._storage.remove_items(ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)
