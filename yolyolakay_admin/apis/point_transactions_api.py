from __future__ import annotations

from typing import Any

from yolyolakay_admin.apis.crud_api import CrudApi
from yolyolakay_admin.filters import PointTransactionFilters


class PointTransactionsApi(CrudApi):
    collection_path = "/point-transactions/"

    def list(
        self,
        page: int | None = None,
        filters: PointTransactionFilters | None = None,
    ) -> dict[str, Any]:
        return super().list(page, filters)
