from __future__ import annotations

from typing import Any

from yolyolakay_admin.apis.crud_api import CrudApi
from yolyolakay_admin.filters import OrderFilters


class OrdersApi(CrudApi):
    collection_path = "/orders/"

    def list(self, page: int | None = None, filters: OrderFilters | None = None) -> dict[str, Any]:
        return super().list(page, filters)
