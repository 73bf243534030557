from __future__ import annotations

from typing import Any, Callable

import requests

from yolyolakay_admin.api_client import ApiClient
from yolyolakay_admin.apis import (
    AccountApi,
    AuthApi,
    BotSettingsApi,
    CardsApi,
    CountriesApi,
    DriversApi,
    InviteLinksApi,
    OrdersApi,
    PointPricesApi,
    PointPurchaseRequestsApi,
    PointTransactionsApi,
    StatisticsApi,
    UsersApi,
)
from yolyolakay_admin.auth import AuthManager
from yolyolakay_admin.config import AppSettings
from yolyolakay_admin.filters import (
    DriverFilters,
    OrderFilters,
    PointPurchaseRequestFilters,
    PointTransactionFilters,
    UserFilters,
)
from yolyolakay_admin.guard import AuthGuard, GuardDecision
from yolyolakay_admin.http import HttpClient
from yolyolakay_admin.models import AuthState, CreateDriverPayload
from yolyolakay_admin.session import SessionStore
from yolyolakay_admin.storage import LocalStorage, UiPreferences


class AdminService:
    """Everything the UI needs, one method per user action."""

    def __init__(
        self,
        auth_manager: AuthManager,
        guard: AuthGuard,
        preferences: UiPreferences,
        users_api: UsersApi,
        drivers_api: DriversApi,
        orders_api: OrdersApi,
        point_transactions_api: PointTransactionsApi,
        bot_settings_api: BotSettingsApi,
        countries_api: CountriesApi,
        point_prices_api: PointPricesApi,
        cards_api: CardsApi,
        point_purchase_requests_api: PointPurchaseRequestsApi,
        invite_links_api: InviteLinksApi,
        statistics_api: StatisticsApi,
        request_timeout_seconds: int,
    ):
        self._auth_manager = auth_manager
        self._guard = guard
        self._preferences = preferences
        self._users_api = users_api
        self._drivers_api = drivers_api
        self._orders_api = orders_api
        self._point_transactions_api = point_transactions_api
        self._bot_settings_api = bot_settings_api
        self._countries_api = countries_api
        self._point_prices_api = point_prices_api
        self._cards_api = cards_api
        self._point_purchase_requests_api = point_purchase_requests_api
        self._invite_links_api = invite_links_api
        self._statistics_api = statistics_api
        self._request_timeout_seconds = request_timeout_seconds

    @property
    def request_timeout_seconds(self) -> int:
        return self._request_timeout_seconds

    # Session

    def auth_state(self) -> AuthState:
        return self._auth_manager.get_auth_state()

    def sign_in(self, username: str, password: str) -> AuthState:
        self._auth_manager.login(username, password)
        return self._auth_manager.get_auth_state()

    def sign_out(self) -> None:
        self._auth_manager.logout()

    def on_signed_out(self, listener: Callable[[], None]) -> None:
        self._auth_manager.add_logout_listener(listener)

    def check_access(self, route: str) -> GuardDecision:
        return self._guard.check(route)

    def is_sidebar_open(self) -> bool:
        return self._preferences.is_sidebar_open()

    def set_sidebar_open(self, is_open: bool) -> None:
        self._preferences.set_sidebar_open(is_open)

    # Users

    def list_users(self, page: int | None = None, filters: UserFilters | None = None) -> dict[str, Any]:
        return self._users_api.list(page, filters)

    def search_users(self, query: str, page: int | None = None) -> dict[str, Any]:
        return self._users_api.search(query, page)

    def get_user(self, user_id: int) -> dict[str, Any]:
        return self._users_api.get(user_id)

    def create_user(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._users_api.create(payload)

    def delete_user(self, user_id: int) -> None:
        self._users_api.delete(user_id)

    # Drivers

    def list_drivers(self, page: int | None = None, filters: DriverFilters | None = None) -> dict[str, Any]:
        return self._drivers_api.list(page, filters)

    def get_driver(self, driver_id: int) -> dict[str, Any]:
        return self._drivers_api.get(driver_id)

    def create_driver(self, payload: CreateDriverPayload) -> dict[str, Any]:
        return self._drivers_api.create(payload)

    def update_driver(self, driver_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._drivers_api.update(driver_id, payload)

    def approve_driver(self, driver_id: int, approved: bool) -> dict[str, Any]:
        return self._drivers_api.update(driver_id, {"is_approved": approved})

    def delete_driver(self, driver_id: int) -> None:
        self._drivers_api.delete(driver_id)

    # Orders

    def list_orders(self, page: int | None = None, filters: OrderFilters | None = None) -> dict[str, Any]:
        return self._orders_api.list(page, filters)

    def get_order(self, order_id: int) -> dict[str, Any]:
        return self._orders_api.get(order_id)

    def update_order(self, order_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._orders_api.update(order_id, payload)

    def delete_order(self, order_id: int) -> None:
        self._orders_api.delete(order_id)

    # Point transactions

    def list_point_transactions(
        self,
        page: int | None = None,
        filters: PointTransactionFilters | None = None,
    ) -> dict[str, Any]:
        return self._point_transactions_api.list(page, filters)

    def get_point_transaction(self, transaction_id: int) -> dict[str, Any]:
        return self._point_transactions_api.get(transaction_id)

    def create_point_transaction(
        self,
        driver_id: int,
        amount: int,
        transaction_type: str,
        reason: str | None = None,
    ) -> dict[str, Any]:
        return self._point_transactions_api.create(
            {
                "driver_id": driver_id,
                "amount": amount,
                "transaction_type": transaction_type,
                "reason": (reason or "").strip() or None,
            }
        )

    def update_point_transaction(self, transaction_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._point_transactions_api.update(transaction_id, payload)

    def delete_point_transaction(self, transaction_id: int) -> None:
        self._point_transactions_api.delete(transaction_id)

    # Bot settings

    def get_bot_settings(self) -> dict[str, Any]:
        return self._bot_settings_api.get()

    def update_bot_settings(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._bot_settings_api.update(payload)

    def set_bot_admins(self, admin_ids: list[int]) -> dict[str, Any]:
        return self._bot_settings_api.update({"admin_ids": list(admin_ids)})

    def create_invite_link(self, group_id: str) -> dict[str, Any]:
        return self._invite_links_api.create(group_id)

    def revoke_invite_link(self, group_id: str, invite_link: str) -> dict[str, Any]:
        return self._invite_links_api.revoke(group_id, invite_link)

    def get_statistics(self) -> dict[str, Any]:
        return self._statistics_api.get()

    # Catalog

    def list_countries(self, page: int | None = None) -> dict[str, Any]:
        return self._countries_api.list(page)

    def save_country(self, payload: dict[str, Any], country_id: int | None = None) -> dict[str, Any]:
        if country_id is None:
            return self._countries_api.create(payload)
        return self._countries_api.update(country_id, payload)

    def delete_country(self, country_id: int) -> None:
        self._countries_api.delete(country_id)

    def list_point_prices(self, page: int | None = None) -> dict[str, Any]:
        return self._point_prices_api.list(page)

    def save_point_price(self, payload: dict[str, Any], price_id: int | None = None) -> dict[str, Any]:
        if price_id is None:
            return self._point_prices_api.create(payload)
        return self._point_prices_api.update(price_id, payload)

    def delete_point_price(self, price_id: int) -> None:
        self._point_prices_api.delete(price_id)

    def list_cards(self, page: int | None = None) -> dict[str, Any]:
        return self._cards_api.list(page)

    def save_card(self, payload: dict[str, Any], card_id: int | None = None) -> dict[str, Any]:
        if card_id is None:
            return self._cards_api.create(payload)
        return self._cards_api.update(card_id, payload)

    def delete_card(self, card_id: int) -> None:
        self._cards_api.delete(card_id)

    # Point purchase requests

    def list_point_purchase_requests(
        self,
        page: int | None = None,
        filters: PointPurchaseRequestFilters | None = None,
    ) -> dict[str, Any]:
        return self._point_purchase_requests_api.list(page, filters)

    def get_point_purchase_request(self, request_id: int) -> dict[str, Any]:
        return self._point_purchase_requests_api.get(request_id)

    def review_point_purchase_request(
        self,
        request_id: int,
        status: str,
        admin_comment: str | None = None,
    ) -> dict[str, Any]:
        return self._point_purchase_requests_api.update(
            request_id,
            {"status": status, "admin_comment": (admin_comment or "").strip() or None},
        )

    def delete_point_purchase_request(self, request_id: int) -> None:
        self._point_purchase_requests_api.delete(request_id)


def build_service(settings: AppSettings, session: requests.Session | None = None) -> AdminService:
    storage = LocalStorage.from_path(settings.storage_path)
    session_store = SessionStore(storage)
    http_client = HttpClient(settings, session_store, session=session)
    auth_manager = AuthManager(AuthApi(http_client), session_store)
    api_client = ApiClient(http_client, session_store, auth_manager)
    return AdminService(
        auth_manager=auth_manager,
        guard=AuthGuard(auth_manager, AccountApi(api_client)),
        preferences=UiPreferences(storage),
        users_api=UsersApi(api_client),
        drivers_api=DriversApi(api_client),
        orders_api=OrdersApi(api_client),
        point_transactions_api=PointTransactionsApi(api_client),
        bot_settings_api=BotSettingsApi(api_client),
        countries_api=CountriesApi(api_client),
        point_prices_api=PointPricesApi(api_client),
        cards_api=CardsApi(api_client),
        point_purchase_requests_api=PointPurchaseRequestsApi(api_client),
        invite_links_api=InviteLinksApi(api_client),
        statistics_api=StatisticsApi(api_client),
        request_timeout_seconds=settings.timeout_seconds,
    )
