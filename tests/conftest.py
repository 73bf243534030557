from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
import json
import threading
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from msal_extensions import FilePersistence

from yolyolakay_admin.config import AppSettings
from yolyolakay_admin.services import build_service
from yolyolakay_admin.session import SessionStore
from yolyolakay_admin.storage import LocalStorage

TEST_BASE_URL = "http://api.test/api"


def make_response(
    status_code: int,
    json_data: Any = None,
    reason: str | None = None,
    content: bytes | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if reason is None:
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = ""
    response.reason = reason
    if content is not None:
        response._content = content
    elif json_data is not None:
        response._content = json.dumps(json_data).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    response.encoding = "utf-8"
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    json: Any = None
    data: Any = None
    files: Any = None
    timeout: Any = None


@dataclass
class FakeSession:
    """Stands in for requests.Session; routes by (method, path below /api)."""

    routes: dict[tuple[str, str], Any] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, method: str, path: str, handler: Any) -> None:
        self.routes[(method, path)] = handler

    def request(self, method, url, headers=None, params=None, timeout=None, json=None, data=None, files=None):
        prepared_url = requests.Request(method, url, params=params).prepare().url
        split = urlsplit(prepared_url)
        path = split.path[len(urlsplit(TEST_BASE_URL).path):]
        merged_headers = dict(self.headers)
        merged_headers.update(headers or {})
        call = RecordedCall(
            method=method,
            url=prepared_url,
            path=path,
            query=parse_qs(split.query),
            headers=merged_headers,
            json=json,
            data=data,
            files=files,
            timeout=timeout,
        )
        with self._lock:
            self.calls.append(call)
            handler = self.routes.get((method, path))
            if isinstance(handler, list):
                handler = handler.pop(0) if handler else None

        if handler is None:
            return make_response(404, {"detail": "Not found."})
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(call)
        return handler

    def calls_to(self, method: str, path: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.method == method and call.path == path]


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        base_url=TEST_BASE_URL,
        timeout_seconds=5,
        storage_path=str(tmp_path / "storage.bin"),
        log_level="INFO",
    )


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(FilePersistence(str(tmp_path / "storage.bin")))


@pytest.fixture
def session_store(storage) -> SessionStore:
    return SessionStore(storage)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def service(settings, fake_session):
    return build_service(settings, session=fake_session)


@pytest.fixture
def signed_in_service(settings, fake_session):
    storage = LocalStorage.from_path(settings.storage_path)
    SessionStore(storage).set_tokens("access-1", "refresh-1")
    return build_service(settings, session=fake_session)
