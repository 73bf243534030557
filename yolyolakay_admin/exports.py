from __future__ import annotations

import csv
from datetime import date
from typing import Any, Iterable, TextIO

from yolyolakay_admin.labels import (
    UNKNOWN_LABEL,
    driver_approval_label,
    order_status_label,
    order_type_label,
)

DRIVER_COLUMNS = ["ID", "Ism", "Telefon", "Yo'nalish", "Holat", "Ballar", "Reyting"]
ORDER_COLUMNS = ["ID", "Turi", "Ism", "Telefon", "Qayerdan", "Qayerga", "Sana", "Holat"]


def default_export_filename(prefix: str, today: date | None = None) -> str:
    today = today or date.today()
    return f"{prefix}-{today.isoformat()}.csv"


def export_drivers_csv(drivers: Iterable[dict[str, Any]], target: TextIO) -> int:
    writer = csv.writer(target, lineterminator="\n")
    writer.writerow(DRIVER_COLUMNS)
    rows = 0
    for driver in drivers:
        user = driver.get("user") or {}
        writer.writerow(
            [
                str(driver.get("id", "")),
                user.get("full_name") or UNKNOWN_LABEL,
                user.get("phone_number") or "Yo'q",
                driver.get("direction_display") or driver.get("direction") or "",
                driver_approval_label(driver.get("is_approved")),
                str(driver.get("points", 0)),
                _format_rating(driver.get("rating")),
            ]
        )
        rows += 1
    return rows


def export_orders_csv(orders: Iterable[dict[str, Any]], target: TextIO) -> int:
    writer = csv.writer(target, lineterminator="\n")
    writer.writerow(ORDER_COLUMNS)
    rows = 0
    for order in orders:
        writer.writerow(
            [
                str(order.get("id", "")),
                order_type_label(order.get("order_type")),
                order.get("full_name") or UNKNOWN_LABEL,
                order.get("phone_number") or "Yo'q",
                _join_location(order, "from"),
                _join_location(order, "to"),
                order.get("order_date") or "",
                order_status_label(order.get("status")),
            ]
        )
        rows += 1
    return rows


def _join_location(order: dict[str, Any], prefix: str) -> str:
    parts = [order.get(f"{prefix}_{part}") for part in ("country", "region", "location")]
    return ", ".join(str(part) for part in parts if part)


def _format_rating(rating: Any) -> str:
    try:
        return f"{float(rating):.1f}"
    except (TypeError, ValueError):
        return "0.0"
