import threading
import time

import pytest

from yolyolakay_admin.api_client import ApiClient
from yolyolakay_admin.apis.auth_api import AuthApi
from yolyolakay_admin.auth import AuthManager
from yolyolakay_admin.http import ApiHttpError, HttpClient, UnauthorizedError

from tests.conftest import make_response


@pytest.fixture
def auth_manager(settings, session_store, fake_session):
    http_client = HttpClient(settings, session_store, session=fake_session)
    return AuthManager(AuthApi(http_client), session_store)


@pytest.fixture
def api_client(settings, session_store, fake_session, auth_manager):
    http_client = HttpClient(settings, session_store, session=fake_session)
    return ApiClient(http_client, session_store, auth_manager)


def _authorized_as(token, body):
    def handler(call):
        if call.headers.get("Authorization") == f"Bearer {token}":
            return make_response(200, body)
        return make_response(401, {"detail": "Given token not valid for any token type"})

    return handler


def test_valid_token_is_sent_once_and_session_is_untouched(api_client, session_store, fake_session, mocker):
    session_store.set_tokens("live", "refresh")
    set_tokens = mocker.spy(session_store, "set_tokens")
    clear = mocker.spy(session_store, "clear")
    fake_session.add("GET", "/orders/", make_response(200, {"results": [], "count": 0}))
    fake_session.add("GET", "/bot-settings/", make_response(200, {"id": 1}))

    api_client.get("/orders/")
    api_client.get("/bot-settings/")

    assert [call.headers["Authorization"] for call in fake_session.calls] == ["Bearer live", "Bearer live"]
    set_tokens.assert_not_called()
    clear.assert_not_called()


def test_401_is_refreshed_and_retried_transparently(api_client, session_store, fake_session):
    session_store.set_tokens("old", "refresh-1")
    fake_session.add("GET", "/orders/7/", _authorized_as("new", {"id": 7}))
    fake_session.add("POST", "/token/refresh/", make_response(200, {"access": "new"}))

    result = api_client.get("/orders/7/")

    assert result == {"id": 7}
    assert session_store.get_access_token() == "new"
    assert session_store.get_refresh_token() == "refresh-1"
    refresh_call = fake_session.calls_to("POST", "/token/refresh/")[0]
    assert refresh_call.json == {"refresh": "refresh-1"}
    assert "Authorization" not in refresh_call.headers
    assert [call.headers.get("Authorization") for call in fake_session.calls_to("GET", "/orders/7/")] == [
        "Bearer old",
        "Bearer new",
    ]


def test_failed_refresh_clears_session_and_raises_unauthorized(
    api_client, auth_manager, session_store, fake_session
):
    signed_out = []
    auth_manager.add_logout_listener(lambda: signed_out.append(True))
    session_store.set_tokens("old", "refresh-1")
    fake_session.add("GET", "/users/", make_response(401, {"detail": "expired"}))
    fake_session.add("POST", "/token/refresh/", make_response(401, {"detail": "Token is blacklisted"}))

    with pytest.raises(UnauthorizedError) as exc_info:
        api_client.get("/users/")

    assert str(exc_info.value) == "Unauthorized: Could not refresh token"
    assert session_store.get_access_token() is None
    assert session_store.get_refresh_token() is None
    assert signed_out == [True]
    assert len(fake_session.calls_to("GET", "/users/")) == 1


def test_refresh_response_without_access_token_counts_as_failure(api_client, session_store, fake_session):
    session_store.set_tokens("old", "refresh-1")
    fake_session.add("GET", "/users/", make_response(401, {"detail": "expired"}))
    fake_session.add("POST", "/token/refresh/", make_response(200, {"unexpected": True}))

    with pytest.raises(UnauthorizedError):
        api_client.get("/users/")

    assert session_store.is_authenticated() is False


def test_second_401_after_retry_is_not_refreshed_again(api_client, session_store, fake_session):
    session_store.set_tokens("old", "refresh-1")
    fake_session.add("GET", "/cards/", make_response(401, {"detail": "still no"}))
    fake_session.add("POST", "/token/refresh/", make_response(200, {"access": "new"}))

    with pytest.raises(UnauthorizedError, match="still no"):
        api_client.get("/cards/")

    assert len(fake_session.calls_to("POST", "/token/refresh/")) == 1
    assert len(fake_session.calls_to("GET", "/cards/")) == 2
    assert session_store.get_access_token() == "new"


def test_auth_calls_never_trigger_a_refresh(api_client, session_store, fake_session):
    session_store.set_tokens("old", "refresh-1")
    fake_session.add("POST", "/token/", make_response(401, {"detail": "No active account"}))

    with pytest.raises(UnauthorizedError, match="No active account"):
        api_client.request("POST", "/token/", body={"username": "x", "password": "y"}, is_auth_call=True)

    assert fake_session.calls_to("POST", "/token/refresh/") == []
    assert session_store.get_access_token() == "old"


def test_401_without_refresh_token_propagates(api_client, session_store, fake_session):
    fake_session.add("GET", "/users/", make_response(401, {"detail": "Authentication required"}))

    with pytest.raises(UnauthorizedError, match="Authentication required"):
        api_client.get("/users/")

    assert fake_session.calls_to("POST", "/token/refresh/") == []


@pytest.mark.parametrize("status_code", [400, 403, 404, 500])
def test_non_401_errors_propagate_without_touching_session(api_client, session_store, fake_session, status_code):
    session_store.set_tokens("live", "refresh-1")
    fake_session.add("DELETE", "/drivers/3/", make_response(status_code, {"detail": "nope"}))

    with pytest.raises(ApiHttpError) as exc_info:
        api_client.delete("/drivers/3/")

    assert exc_info.value.status_code == status_code
    assert session_store.get_access_token() == "live"
    assert fake_session.calls_to("POST", "/token/refresh/") == []
    assert len(fake_session.calls) == 1


def test_concurrent_401s_share_one_refresh(api_client, session_store, fake_session):
    session_store.set_tokens("old", "refresh-1")
    both_rejected = threading.Barrier(2, timeout=5)
    refresh_calls = []

    def orders(call):
        if call.headers.get("Authorization") == "Bearer old":
            both_rejected.wait()
            return make_response(401, {"detail": "expired"})
        return make_response(200, {"results": [], "count": 0})

    def refresh(call):
        refresh_calls.append(call)
        time.sleep(0.05)
        return make_response(200, {"access": "new"})

    fake_session.add("GET", "/orders/", orders)
    fake_session.add("POST", "/token/refresh/", refresh)

    results = []
    errors = []

    def worker():
        try:
            results.append(api_client.get("/orders/"))
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert results == [{"results": [], "count": 0}] * 2
    assert len(refresh_calls) == 1
    assert session_store.get_access_token() == "new"


def test_multipart_uploads_are_rewound_before_retry(api_client, session_store, fake_session, tmp_path):
    session_store.set_tokens("old", "refresh-1")
    photo = tmp_path / "car.jpg"
    photo.write_bytes(b"jpeg-bytes")
    seen = []

    def drivers(call):
        seen.append(call.files["car_photo"][1].read())
        if call.headers.get("Authorization") == "Bearer new":
            return make_response(201, {"id": 9})
        return make_response(401, {"detail": "expired"})

    fake_session.add("POST", "/drivers/", drivers)
    fake_session.add("POST", "/token/refresh/", make_response(200, {"access": "new"}))

    with photo.open("rb") as handle:
        result = api_client.post("/drivers/", {"user_id": "1"}, files={"car_photo": ("car.jpg", handle)})

    assert result == {"id": 9}
    assert seen == [b"jpeg-bytes", b"jpeg-bytes"]
