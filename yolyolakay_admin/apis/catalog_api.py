from __future__ import annotations

from yolyolakay_admin.apis.crud_api import CrudApi


class CountriesApi(CrudApi):
    collection_path = "/countries/"


class PointPricesApi(CrudApi):
    collection_path = "/point-prices/"


class CardsApi(CrudApi):
    collection_path = "/cards/"
