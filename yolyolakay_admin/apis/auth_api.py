from __future__ import annotations

from typing import Any

from yolyolakay_admin.http import HttpClient
from yolyolakay_admin.models import RequestDescriptor

TOKEN_PATH = "/token/"
TOKEN_REFRESH_PATH = "/token/refresh/"
CURRENT_USER_PATH = "/auth/user/"


class AuthApi:
    """Token endpoints. These are auth calls and bypass the refresh machinery."""

    def __init__(self, http_client: HttpClient):
        self._http_client = http_client

    def obtain_token(self, username: str, password: str) -> dict[str, Any]:
        return self._http_client.send(
            RequestDescriptor(
                "POST",
                TOKEN_PATH,
                body={"username": username, "password": password},
                is_auth_call=True,
            )
        )

    def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        return self._http_client.send(
            RequestDescriptor(
                "POST",
                TOKEN_REFRESH_PATH,
                body={"refresh": refresh_token},
                is_auth_call=True,
            )
        )
