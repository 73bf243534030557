from __future__ import annotations

from typing import Any

from yolyolakay_admin.apis.crud_api import CrudApi
from yolyolakay_admin.filters import PointPurchaseRequestFilters


class PointPurchaseRequestsApi(CrudApi):
    collection_path = "/point-purchase-requests/"

    def list(
        self,
        page: int | None = None,
        filters: PointPurchaseRequestFilters | None = None,
    ) -> dict[str, Any]:
        return super().list(page, filters)
