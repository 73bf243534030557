from __future__ import annotations

import logging
from typing import Any

import requests

from yolyolakay_admin.config import AppSettings
from yolyolakay_admin.models import HTTP_METHODS, RequestDescriptor
from yolyolakay_admin.session import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "API request failed"


class ApiError(RuntimeError):
    pass


class ApiConnectionError(ApiError):
    pass


class ApiHttpError(ApiError):
    def __init__(self, status_code: int, message: str, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnauthorizedError(ApiHttpError):
    def __init__(self, message: str, body: Any = None):
        super().__init__(401, message, body)


class HttpClient:
    """Sends exactly one HTTP request per call; no retries."""

    def __init__(
        self,
        settings: AppSettings,
        session_store: SessionStore,
        session: requests.Session | None = None,
    ):
        self._settings = settings
        self._session_store = session_store
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def send(self, descriptor: RequestDescriptor) -> Any:
        method = descriptor.method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {descriptor.method}")

        url = f"{self._settings.base_url}{descriptor.path}"
        headers = self._build_headers(descriptor)

        request_kwargs: dict[str, Any] = {
            "headers": headers,
            "params": descriptor.params or None,
            "timeout": self._settings.timeout_seconds,
        }
        if descriptor.files:
            # requests sets the multipart Content-Type with its boundary.
            request_kwargs["files"] = descriptor.files
            request_kwargs["data"] = descriptor.body or {}
        elif descriptor.body is not None:
            request_kwargs["json"] = descriptor.body

        try:
            response = self._session.request(method, url, **request_kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, descriptor.path, exc)
            raise ApiConnectionError(f"Could not reach the server: {exc}") from exc

        logger.debug("%s %s -> %s", method, descriptor.path, response.status_code)

        if response.ok:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise ApiError(
                    f"{method} {descriptor.path} returned a non-JSON response"
                ) from exc

        raise self._build_error(response)

    def _build_headers(self, descriptor: RequestDescriptor) -> dict[str, str]:
        headers: dict[str, str] = {}
        if descriptor.is_auth_call:
            return headers

        access_token = self._session_store.get_access_token()
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    @staticmethod
    def _build_error(response: requests.Response) -> ApiHttpError:
        body: Any = None
        try:
            body = response.json()
        except ValueError:
            message = response.reason or DEFAULT_ERROR_MESSAGE
        else:
            message = DEFAULT_ERROR_MESSAGE
            if isinstance(body, dict):
                message = str(body.get("detail") or body.get("message") or DEFAULT_ERROR_MESSAGE)

        if response.status_code == 401:
            return UnauthorizedError(message, body)
        return ApiHttpError(response.status_code, message, body)
