from __future__ import annotations

from dataclasses import dataclass
import enum
import logging
from typing import Any

from yolyolakay_admin.apis.account_api import AccountApi
from yolyolakay_admin.auth import AuthManager
from yolyolakay_admin.http import ApiError

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "login"


class GuardOutcome(enum.Enum):
    ALLOW = "allow"
    REDIRECT_TO_LOGIN = "redirect_to_login"


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    user: dict[str, Any] | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.ALLOW


class AuthGuard:
    """One-shot check run when a protected screen is first shown."""

    def __init__(self, auth_manager: AuthManager, account_api: AccountApi):
        self._auth_manager = auth_manager
        self._account_api = account_api

    def check(self, route: str) -> GuardDecision:
        if route == LOGIN_ROUTE:
            return GuardDecision(GuardOutcome.ALLOW)

        if not self._auth_manager.is_authenticated():
            logger.info("No session, redirecting %s to login", route)
            return GuardDecision(GuardOutcome.REDIRECT_TO_LOGIN)

        try:
            user = self._account_api.get_current_user()
        except ApiError as exc:
            logger.info("Session check failed for %s: %s", route, exc)
            return GuardDecision(GuardOutcome.REDIRECT_TO_LOGIN)

        if isinstance(user, dict):
            self._auth_manager.remember_user(user)
        return GuardDecision(GuardOutcome.ALLOW, user=user)
