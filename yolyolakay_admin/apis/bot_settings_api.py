from __future__ import annotations

from typing import Any

from yolyolakay_admin.api_client import ApiClient

BOT_SETTINGS_PATH = "/bot-settings/"
INVITE_LINK_CREATE_PATH = "/invite-links/create/"
INVITE_LINK_REVOKE_PATH = "/invite-links/revoke/"
STATISTICS_PATH = "/statistics/"


class BotSettingsApi:
    def __init__(self, api_client: ApiClient):
        self._api_client = api_client

    def get(self) -> dict[str, Any]:
        return self._api_client.get(BOT_SETTINGS_PATH)

    def update(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._api_client.patch(BOT_SETTINGS_PATH, payload)


class InviteLinksApi:
    def __init__(self, api_client: ApiClient):
        self._api_client = api_client

    def create(self, group_id: str) -> dict[str, Any]:
        return self._api_client.post(INVITE_LINK_CREATE_PATH, {"group_id": group_id})

    def revoke(self, group_id: str, invite_link: str) -> dict[str, Any]:
        return self._api_client.post(
            INVITE_LINK_REVOKE_PATH,
            {"group_id": group_id, "invite_link": invite_link},
        )


class StatisticsApi:
    def __init__(self, api_client: ApiClient):
        self._api_client = api_client

    def get(self) -> dict[str, Any]:
        return self._api_client.get(STATISTICS_PATH)
