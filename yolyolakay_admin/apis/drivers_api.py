from __future__ import annotations

from contextlib import ExitStack
import os
from typing import Any

from yolyolakay_admin.apis.crud_api import CrudApi
from yolyolakay_admin.filters import DriverFilters
from yolyolakay_admin.models import CreateDriverPayload


class DriversApi(CrudApi):
    collection_path = "/drivers/"

    def list(self, page: int | None = None, filters: DriverFilters | None = None) -> dict[str, Any]:
        return super().list(page, filters)

    def create(self, payload: CreateDriverPayload) -> dict[str, Any]:
        with ExitStack() as stack:
            files = {
                field_name: (os.path.basename(path), stack.enter_context(open(path, "rb")))
                for field_name, path in payload.photo_paths().items()
            }
            return self._api_client.post(
                self.collection_path,
                payload.form_fields(),
                files=files,
            )
