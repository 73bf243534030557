from __future__ import annotations

import enum
from typing import Any

from yolyolakay_admin.models import DRIVER_PHOTO_FIELDS, CreateDriverPayload
from yolyolakay_admin.services import AdminService

DEFAULT_DIRECTION = "taxi"


class WizardError(ValueError):
    pass


class WizardStep(enum.IntEnum):
    SELECT_USER = 1
    DRIVER_DETAILS = 2


class DriverCreationWizard:
    """Two-step flow for registering an existing bot user as a driver.

    Step one finds and picks the user, step two collects the direction and
    the four document photos. Nothing is sent until ``submit``.
    """

    def __init__(self, service: AdminService):
        self._service = service
        self.reset()

    def reset(self) -> None:
        self.step = WizardStep.SELECT_USER
        self.selected_user: dict[str, Any] | None = None
        self.direction = DEFAULT_DIRECTION
        self.photos: dict[str, str | None] = {name: None for name in DRIVER_PHOTO_FIELDS}

    def search_users(self, query: str) -> list[dict[str, Any]]:
        query = query.strip()
        if not query:
            return []
        response = self._service.search_users(query)
        results = response.get("results") if isinstance(response, dict) else None
        return results if isinstance(results, list) else []

    def select_user(self, user: dict[str, Any]) -> None:
        if not isinstance(user, dict) or user.get("id") is None:
            raise WizardError("Select a user with an id")
        self.selected_user = user
        self.step = WizardStep.DRIVER_DETAILS

    def back(self) -> None:
        self.step = WizardStep.SELECT_USER

    def set_direction(self, direction: str) -> None:
        direction = direction.strip()
        if not direction:
            raise WizardError("Direction is required")
        self.direction = direction

    def set_photo(self, field_name: str, path: str) -> None:
        if field_name not in self.photos:
            raise WizardError(f"Unknown photo field: {field_name}")
        self.photos[field_name] = path or None

    def missing_photos(self) -> list[str]:
        return [name for name, path in self.photos.items() if not path]

    def submit(self) -> dict[str, Any]:
        if self.selected_user is None:
            raise WizardError("Iltimos, avval foydalanuvchini tanlang.")
        if self.missing_photos():
            raise WizardError("Iltimos, barcha rasm maydonlarini to'ldiring.")

        payload = CreateDriverPayload(
            user_id=int(self.selected_user["id"]),
            direction=self.direction,
            **{name: str(path) for name, path in self.photos.items()},
        )
        driver = self._service.create_driver(payload)
        self.reset()
        return driver
