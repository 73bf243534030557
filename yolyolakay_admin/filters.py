from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Any


def build_query_params(page: int | None = None, filters: Any = None) -> dict[str, str]:
    """Translate a page number and a filter dataclass into query parameters.

    ``None`` and blank strings are dropped; other strings are sent as given.
    Booleans are sent as ``true``/``false`` and dates as ``YYYY-MM-DD``.
    """
    params: dict[str, str] = {}
    if page is not None:
        params["page"] = _format_value(page)

    if filters is not None:
        for item in fields(filters):
            value = getattr(filters, item.name)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            params[item.name] = _format_value(value)
    return params


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class UserFilters:
    query: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class DriverFilters:
    is_approved: bool | None = None
    direction: str | None = None
    region: str | None = None
    search: str | None = None


@dataclass(frozen=True)
class OrderFilters:
    status: str | None = None
    order_type: str | None = None
    date_from: date | str | None = None
    date_to: date | str | None = None
    search: str | None = None
    order_number: str | None = None


@dataclass(frozen=True)
class PointTransactionFilters:
    driver_id: int | None = None
    transaction_type: str | None = None


@dataclass(frozen=True)
class PointPurchaseRequestFilters:
    status: str | None = None
    driver_id: int | None = None
