from __future__ import annotations

from typing import Any

from yolyolakay_admin.apis.crud_api import CrudApi
from yolyolakay_admin.filters import UserFilters, build_query_params


class UsersApi(CrudApi):
    collection_path = "/users/"

    def list(self, page: int | None = None, filters: UserFilters | None = None) -> dict[str, Any]:
        return super().list(page, filters)

    def search(self, query: str, page: int | None = None) -> dict[str, Any]:
        params = build_query_params(page, UserFilters(query=query))
        return self._api_client.get(f"{self.collection_path}search/", params=params or None)
