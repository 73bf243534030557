from __future__ import annotations

from typing import Any

from yolyolakay_admin.api_client import ApiClient
from yolyolakay_admin.apis.auth_api import CURRENT_USER_PATH


class AccountApi:
    def __init__(self, api_client: ApiClient):
        self._api_client = api_client

    def get_current_user(self) -> dict[str, Any]:
        return self._api_client.get(CURRENT_USER_PATH)
