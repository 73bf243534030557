from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from yolyolakay_admin.services import AdminService

COUNTRIES = "countries"
POINT_PRICES = "point_prices"
CARDS = "cards"

TEXT = "text"
INTEGER = "integer"
FLAG = "flag"
CHOICE = "choice"


class CatalogError(ValueError):
    pass


@dataclass(frozen=True)
class CatalogField:
    name: str
    label: str
    kind: str = TEXT
    required: bool = False
    default: str = ""
    choices: tuple[str, ...] = ()


CATALOG_TITLES = {
    COUNTRIES: "Countries",
    POINT_PRICES: "Point prices",
    CARDS: "Cards",
}

CATALOG_FIELDS: dict[str, tuple[CatalogField, ...]] = {
    COUNTRIES: (
        CatalogField("code", "Kod", required=True),
        CatalogField("name_uz", "Nomi (uz)", required=True),
        CatalogField("name_ru", "Nomi (ru)", required=True),
        CatalogField("name_en", "Nomi (en)", required=True),
        CatalogField("name_tj", "Nomi (tj)", required=True),
        CatalogField("name_kz", "Nomi (kz)", required=True),
    ),
    POINT_PRICES: (
        CatalogField("name", "Nomi", required=True),
        CatalogField("service", "Xizmat", kind=CHOICE, default="cargo", choices=("cargo", "taxi_package")),
        CatalogField("point_amount", "Ball miqdori", kind=INTEGER, required=True, default="0"),
        CatalogField("price", "Narxi", kind=INTEGER, required=True, default="0"),
        CatalogField("discount_percentage", "Chegirma %", kind=INTEGER, default="0"),
        CatalogField("order_number", "Tartib raqami", kind=INTEGER, required=True, default="0"),
        CatalogField("is_active", "Faol", kind=FLAG, default="true"),
        CatalogField("is_popular", "Mashhur", kind=FLAG, default="false"),
        CatalogField("description", "Tavsif"),
    ),
    CARDS: (
        CatalogField("card_number", "Karta raqami", required=True),
        CatalogField("card_holder_name", "Karta egasi", required=True),
        CatalogField("bank_name", "Bank nomi", required=True),
        CatalogField("is_active", "Faol", kind=FLAG, default="true"),
    ),
}


def catalog_fields(catalog: str) -> tuple[CatalogField, ...]:
    try:
        return CATALOG_FIELDS[catalog]
    except KeyError:
        raise CatalogError(f"Unknown catalog: {catalog}") from None


def build_catalog_payload(catalog: str, values: dict[str, str]) -> dict[str, Any]:
    """Turn raw form strings into the JSON body the backend expects.

    Integer fields must parse, flags are ``"true"``/``"false"`` and choice
    fields must be one of their choices. Blank optional fields fall back to
    the field default.
    """
    payload: dict[str, Any] = {}
    for field in catalog_fields(catalog):
        raw = (values.get(field.name) or "").strip()
        if not raw:
            if field.required and field.kind == TEXT:
                raise CatalogError(f"{field.label} maydoni to'ldirilishi shart.")
            raw = field.default

        if field.kind == INTEGER:
            try:
                payload[field.name] = int(raw)
            except ValueError:
                raise CatalogError(f"{field.label} butun son bo'lishi kerak.") from None
        elif field.kind == FLAG:
            payload[field.name] = raw.lower() == "true"
        elif field.kind == CHOICE:
            if raw not in field.choices:
                raise CatalogError(f"{field.label}: {raw!r} qiymati noto'g'ri.")
            payload[field.name] = raw
        else:
            payload[field.name] = raw
    return payload


def catalog_form_values(catalog: str, item: dict[str, Any]) -> dict[str, str]:
    values = {}
    for field in catalog_fields(catalog):
        value = item.get(field.name)
        if value is None:
            values[field.name] = field.default
        elif isinstance(value, bool):
            values[field.name] = "true" if value else "false"
        else:
            values[field.name] = str(value)
    return values


class CatalogEditor:
    """List, save and delete for the countries, point prices and cards lists."""

    def __init__(self, service: AdminService):
        self._service = service
        self._actions = {
            COUNTRIES: (service.list_countries, service.save_country, service.delete_country),
            POINT_PRICES: (service.list_point_prices, service.save_point_price, service.delete_point_price),
            CARDS: (service.list_cards, service.save_card, service.delete_card),
        }

    def _actions_for(self, catalog: str):
        try:
            return self._actions[catalog]
        except KeyError:
            raise CatalogError(f"Unknown catalog: {catalog}") from None

    def list(self, catalog: str, page: int | None = None) -> dict[str, Any]:
        list_items, _save, _delete = self._actions_for(catalog)
        return list_items(page)

    def save(self, catalog: str, values: dict[str, str], item_id: int | None = None) -> dict[str, Any]:
        _list, save_item, _delete = self._actions_for(catalog)
        return save_item(build_catalog_payload(catalog, values), item_id)

    def delete(self, catalog: str, item_id: int) -> None:
        _list, _save, delete_item = self._actions_for(catalog)
        delete_item(item_id)
