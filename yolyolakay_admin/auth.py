from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from yolyolakay_admin.apis.auth_api import AuthApi
from yolyolakay_admin.http import ApiError
from yolyolakay_admin.models import AuthState
from yolyolakay_admin.session import SessionStore

logger = logging.getLogger(__name__)


class AuthenticationError(ApiError):
    pass


class AuthManager:
    """Owns the login/refresh/logout lifecycle of a session.

    Refreshes are single-flight: callers that saw the same access token
    rejected at the same time share one call to the refresh endpoint.
    """

    def __init__(self, auth_api: AuthApi, session_store: SessionStore):
        self._auth_api = auth_api
        self._session_store = session_store
        self._refresh_lock = threading.Lock()
        self._logout_listeners: list[Callable[[], None]] = []
        self._username: str | None = None
        self._is_staff = False

    def add_logout_listener(self, listener: Callable[[], None]) -> None:
        self._logout_listeners.append(listener)

    def is_authenticated(self) -> bool:
        return self._session_store.is_authenticated()

    def login(self, username: str, password: str) -> dict[str, Any]:
        username = username.strip()
        if not username or not password:
            raise AuthenticationError("Username and password are required")

        data = self._auth_api.obtain_token(username, password)
        access = data.get("access") if isinstance(data, dict) else None
        refresh = data.get("refresh") if isinstance(data, dict) else None
        if not access or not refresh:
            raise AuthenticationError("Login response did not contain a token pair")

        self._session_store.set_tokens(str(access), str(refresh))
        self._username = username
        logger.info("Signed in as %s", username)
        return data

    def refresh_access_token(self, stale_token: str | None = None) -> bool:
        """Exchange the refresh token for a new access token.

        ``stale_token`` is the access token the caller saw rejected. If the
        live token has already moved past it by the time the lock is held,
        another caller refreshed in the meantime and no request is sent.
        """
        with self._refresh_lock:
            refresh_token = self._session_store.get_refresh_token()
            if not refresh_token:
                return False

            current = self._session_store.get_access_token()
            if stale_token is not None and current and current != stale_token:
                logger.debug("Access token already refreshed by a concurrent call")
                return True

            access = self._exchange_refresh_token(refresh_token)
            if access:
                self._session_store.set_tokens(access)
                logger.info("Access token refreshed")
                return True

            # Cleared under the lock so queued callers see no refresh token.
            self._clear_session()

        logger.warning("Session expired, sign in again")
        self._notify_logout()
        return False

    def _exchange_refresh_token(self, refresh_token: str) -> str | None:
        try:
            data = self._auth_api.refresh_token(refresh_token)
        except ApiError as exc:
            logger.warning("Failed to refresh access token: %s", exc)
            return None

        access = data.get("access") if isinstance(data, dict) else None
        if not access:
            logger.warning("Refresh response did not contain an access token")
            return None
        return str(access)

    def logout(self) -> None:
        self._clear_session()
        logger.info("Signed out")
        self._notify_logout()

    def _clear_session(self) -> None:
        self._session_store.clear()
        self._username = None
        self._is_staff = False

    def _notify_logout(self) -> None:
        for listener in list(self._logout_listeners):
            listener()

    def remember_user(self, user: dict[str, Any]) -> None:
        self._username = str(user.get("username") or "") or self._username
        self._is_staff = bool(user.get("is_staff", False))

    def get_auth_state(self) -> AuthState:
        if not self.is_authenticated():
            return AuthState(is_signed_in=False)
        return AuthState(
            is_signed_in=True,
            username=self._username,
            is_staff=self._is_staff,
        )
