from __future__ import annotations

from typing import Any

from yolyolakay_admin.api_client import ApiClient
from yolyolakay_admin.filters import build_query_params


class CrudApi:
    """List/get/create/update/delete for a collection at ``collection_path``."""

    collection_path = ""

    def __init__(self, api_client: ApiClient):
        self._api_client = api_client

    def _item_path(self, item_id: int) -> str:
        return f"{self.collection_path}{item_id}/"

    def list(self, page: int | None = None, filters: Any = None) -> dict[str, Any]:
        params = build_query_params(page, filters)
        return self._api_client.get(self.collection_path, params=params or None)

    def get(self, item_id: int) -> dict[str, Any]:
        return self._api_client.get(self._item_path(item_id))

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._api_client.post(self.collection_path, payload)

    def update(self, item_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._api_client.patch(self._item_path(item_id), payload)

    def delete(self, item_id: int) -> None:
        self._api_client.delete(self._item_path(item_id))
