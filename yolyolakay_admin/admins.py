from __future__ import annotations

from typing import Any

from yolyolakay_admin.services import AdminService


def filter_users(users: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """Match on id, name, phone number or Telegram id, case-insensitively."""
    query = query.strip().lower()
    if not query:
        return list(users)

    def matches(user: dict[str, Any]) -> bool:
        candidates = (user.get("id"), user.get("full_name"), user.get("phone_number"), user.get("telegram_id"))
        return any(query in str(value).lower() for value in candidates if value is not None)

    return [user for user in users if matches(user)]


class AdminPicker:
    """Selects which bot users are bot administrators.

    ``load`` fetches the current settings and the user list; ``toggle``
    edits the selection locally; ``save`` sends the whole selection.
    """

    def __init__(self, service: AdminService):
        self._service = service
        self.users: list[dict[str, Any]] = []
        self.selected_ids: list[int] = []

    def load(self) -> None:
        settings = self._service.get_bot_settings() or {}
        users = self._service.list_users()
        self.selected_ids = [int(admin["id"]) for admin in settings.get("admins") or [] if admin.get("id") is not None]
        results = users.get("results") if isinstance(users, dict) else None
        self.users = results if isinstance(results, list) else []

    def is_selected(self, user_id: int) -> bool:
        return user_id in self.selected_ids

    def toggle(self, user_id: int) -> bool:
        if user_id in self.selected_ids:
            self.selected_ids.remove(user_id)
            return False
        self.selected_ids.append(user_id)
        return True

    def visible_users(self, query: str = "") -> list[dict[str, Any]]:
        return filter_users(self.users, query)

    def save(self) -> dict[str, Any]:
        settings = self._service.set_bot_admins(self.selected_ids)
        admins = settings.get("admins") if isinstance(settings, dict) else None
        if isinstance(admins, list):
            self.selected_ids = [int(admin["id"]) for admin in admins if admin.get("id") is not None]
        return settings
