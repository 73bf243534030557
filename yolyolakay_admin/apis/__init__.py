from .account_api import AccountApi
from .auth_api import AuthApi
from .bot_settings_api import BotSettingsApi, InviteLinksApi, StatisticsApi
from .catalog_api import CardsApi, CountriesApi, PointPricesApi
from .drivers_api import DriversApi
from .orders_api import OrdersApi
from .point_purchase_requests_api import PointPurchaseRequestsApi
from .point_transactions_api import PointTransactionsApi
from .users_api import UsersApi

__all__ = [
    "AccountApi",
    "AuthApi",
    "BotSettingsApi",
    "CardsApi",
    "CountriesApi",
    "DriversApi",
    "InviteLinksApi",
    "OrdersApi",
    "PointPricesApi",
    "PointPurchaseRequestsApi",
    "PointTransactionsApi",
    "StatisticsApi",
    "UsersApi",
]
