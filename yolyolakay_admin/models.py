from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JsonDict = dict[str, Any]

HTTP_METHODS = ("GET", "POST", "PATCH", "DELETE")

# Server-side page sizes; the API does not report them.
USERS_PAGE_SIZE = 20
DRIVERS_PAGE_SIZE = 10
ORDERS_PAGE_SIZE = 10
POINT_TRANSACTIONS_PAGE_SIZE = 10

DRIVER_PHOTO_FIELDS = (
    "passport_photo",
    "driver_license_photo",
    "sts_photo",
    "car_photo",
)


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    body: Any = None
    params: dict[str, str] | None = None
    files: dict[str, Any] | None = None
    is_auth_call: bool = False


@dataclass(frozen=True)
class AuthState:
    is_signed_in: bool
    username: str | None = None
    is_staff: bool = False


@dataclass
class CreateDriverPayload:
    user_id: int
    direction: str
    passport_photo: str
    driver_license_photo: str
    sts_photo: str
    car_photo: str

    def photo_paths(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in DRIVER_PHOTO_FIELDS}

    def form_fields(self) -> dict[str, str]:
        return {"user_id": str(self.user_id), "direction": self.direction}


@dataclass(frozen=True)
class Page:
    results: list[JsonDict] = field(default_factory=list)
    count: int = 0

    @staticmethod
    def from_response(response: JsonDict | None) -> "Page":
        if not isinstance(response, dict):
            return Page()
        results = response.get("results")
        count = response.get("count")
        if not isinstance(results, list):
            results = []
        if not isinstance(count, int):
            count = len(results)
        return Page(results=results, count=count)


def page_count(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be greater than 0")
    return max(1, -(-count // page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), max(1, total_pages))
