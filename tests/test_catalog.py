import pytest

from yolyolakay_admin.catalog import (
    CARDS,
    COUNTRIES,
    POINT_PRICES,
    CatalogEditor,
    CatalogError,
    build_catalog_payload,
    catalog_form_values,
)

from tests.conftest import make_response

COUNTRY_VALUES = {
    "code": "UZ",
    "name_uz": "O'zbekiston",
    "name_ru": "Узбекистан",
    "name_en": "Uzbekistan",
    "name_tj": "Ӯзбекистон",
    "name_kz": "Өзбекстан",
}


@pytest.fixture
def editor(signed_in_service):
    return CatalogEditor(signed_in_service)


def test_point_price_payload_is_typed():
    payload = build_catalog_payload(
        POINT_PRICES,
        {
            "name": "100 ball",
            "service": "taxi_package",
            "point_amount": "100",
            "price": " 50000 ",
            "discount_percentage": "",
            "order_number": "1",
            "is_active": "true",
            "is_popular": "false",
            "description": "",
        },
    )

    assert payload == {
        "name": "100 ball",
        "service": "taxi_package",
        "point_amount": 100,
        "price": 50000,
        "discount_percentage": 0,
        "order_number": 1,
        "is_active": True,
        "is_popular": False,
        "description": "",
    }


@pytest.mark.parametrize(
    "values, message",
    [
        ({"name": "", "point_amount": "1", "price": "1", "order_number": "1"}, "Nomi"),
        ({"name": "x", "point_amount": "ko'p", "price": "1", "order_number": "1"}, "Ball miqdori"),
        ({"name": "x", "service": "plane", "point_amount": "1", "price": "1", "order_number": "1"}, "Xizmat"),
    ],
)
def test_invalid_point_price_values(values, message):
    with pytest.raises(CatalogError, match=message):
        build_catalog_payload(POINT_PRICES, values)


def test_unknown_catalog_is_rejected():
    with pytest.raises(CatalogError):
        build_catalog_payload("regions", {})


def test_form_values_round_trip_an_existing_card():
    card = {"id": 7, "card_number": "8600 1234", "card_holder_name": "ALI", "bank_name": None, "is_active": False}

    assert catalog_form_values(CARDS, card) == {
        "card_number": "8600 1234",
        "card_holder_name": "ALI",
        "bank_name": "",
        "is_active": "false",
    }


def test_save_without_id_creates(editor, fake_session):
    fake_session.add("POST", "/countries/", make_response(201, {"id": 1, **COUNTRY_VALUES}))

    editor.save(COUNTRIES, COUNTRY_VALUES)

    assert fake_session.calls[0].json == COUNTRY_VALUES


def test_save_with_id_updates(editor, fake_session):
    fake_session.add("PATCH", "/cards/7/", make_response(200, {"id": 7}))

    editor.save(CARDS, {"card_number": "8600", "card_holder_name": "ALI", "bank_name": "Kapital", "is_active": "true"}, 7)

    assert fake_session.calls[0].json == {
        "card_number": "8600",
        "card_holder_name": "ALI",
        "bank_name": "Kapital",
        "is_active": True,
    }


def test_invalid_form_sends_nothing(editor, fake_session):
    with pytest.raises(CatalogError):
        editor.save(CARDS, {"card_number": "8600"})

    assert fake_session.calls == []


def test_list_and_delete(editor, fake_session):
    fake_session.add("GET", "/point-prices/", make_response(200, {"results": [{"id": 3}], "count": 1}))
    fake_session.add("DELETE", "/point-prices/3/", make_response(204))

    assert editor.list(POINT_PRICES)["results"] == [{"id": 3}]
    editor.delete(POINT_PRICES, 3)

    assert [(call.method, call.path) for call in fake_session.calls] == [
        ("GET", "/point-prices/"),
        ("DELETE", "/point-prices/3/"),
    ]
