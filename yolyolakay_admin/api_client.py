from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from yolyolakay_admin.http import HttpClient, UnauthorizedError
from yolyolakay_admin.models import RequestDescriptor
from yolyolakay_admin.session import SessionStore

if TYPE_CHECKING:
    from yolyolakay_admin.auth import AuthManager

logger = logging.getLogger(__name__)


class ApiClient:
    """Makes a 401 invisible to callers when the session can be refreshed.

    A rejected call triggers at most one refresh and one retry. Anything
    that goes wrong on the retry is raised as-is.
    """

    def __init__(self, http_client: HttpClient, session_store: SessionStore, auth_manager: AuthManager):
        self._http_client = http_client
        self._session_store = session_store
        self._auth_manager = auth_manager

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        is_auth_call: bool = False,
    ) -> Any:
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            body=body,
            params=params,
            files=files,
            is_auth_call=is_auth_call,
        )
        return self.execute(descriptor)

    def execute(self, descriptor: RequestDescriptor) -> Any:
        sent_with = self._session_store.get_access_token()
        try:
            return self._http_client.send(descriptor)
        except UnauthorizedError:
            if descriptor.is_auth_call or not self._session_store.get_refresh_token():
                raise

        logger.info("%s %s was rejected with 401, refreshing session", descriptor.method, descriptor.path)
        if not self._auth_manager.refresh_access_token(sent_with):
            raise UnauthorizedError("Unauthorized: Could not refresh token")

        _rewind_files(descriptor.files)
        return self._http_client.send(descriptor)

    def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Any = None, files: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, body=body, files=files)

    def patch(self, path: str, body: Any = None) -> Any:
        return self.request("PATCH", path, body=body)

    def delete(self, path: str) -> None:
        self.request("DELETE", path)


def _rewind_files(files: dict[str, Any] | None) -> None:
    # A multipart retry must resend the uploads from the start.
    if not files:
        return
    for value in files.values():
        handle = value[1] if isinstance(value, tuple) else value
        seek = getattr(handle, "seek", None)
        if callable(seek):
            seek(0)
