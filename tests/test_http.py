import pytest
import requests

from yolyolakay_admin.http import (
    ApiConnectionError,
    ApiError,
    ApiHttpError,
    HttpClient,
    UnauthorizedError,
)
from yolyolakay_admin.models import RequestDescriptor

from tests.conftest import make_response


@pytest.fixture
def http_client(settings, session_store, fake_session):
    return HttpClient(settings, session_store, session=fake_session)


def test_attaches_bearer_token_when_present(http_client, session_store, fake_session):
    session_store.set_tokens("tok", "ref")
    fake_session.add("GET", "/users/", make_response(200, {"results": [], "count": 0}))

    http_client.send(RequestDescriptor("GET", "/users/"))

    call = fake_session.calls[0]
    assert call.headers["Authorization"] == "Bearer tok"
    assert call.url == "http://api.test/api/users/"
    assert call.timeout == 5


def test_auth_call_never_carries_a_token(http_client, session_store, fake_session):
    session_store.set_tokens("tok", "ref")
    fake_session.add("POST", "/token/", make_response(200, {"access": "a", "refresh": "r"}))

    http_client.send(RequestDescriptor("POST", "/token/", body={"username": "u"}, is_auth_call=True))

    assert "Authorization" not in fake_session.calls[0].headers


def test_no_token_means_no_authorization_header(http_client, fake_session):
    fake_session.add("GET", "/statistics/", make_response(200, {}))

    http_client.send(RequestDescriptor("GET", "/statistics/"))

    assert "Authorization" not in fake_session.calls[0].headers


def test_json_body_is_sent_as_json(http_client, fake_session):
    fake_session.add("PATCH", "/orders/42/", make_response(200, {"id": 42, "status": "completed"}))

    result = http_client.send(RequestDescriptor("PATCH", "/orders/42/", body={"status": "completed"}))

    assert fake_session.calls[0].json == {"status": "completed"}
    assert result == {"id": 42, "status": "completed"}


def test_empty_success_body_returns_none(http_client, fake_session):
    fake_session.add("DELETE", "/orders/42/", make_response(204))

    assert http_client.send(RequestDescriptor("DELETE", "/orders/42/")) is None


def test_non_json_success_body_raises_api_error(http_client, fake_session):
    fake_session.add("GET", "/statistics/", make_response(200, content=b"<html>oops</html>"))

    with pytest.raises(ApiError, match="non-JSON"):
        http_client.send(RequestDescriptor("GET", "/statistics/"))


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"detail": "Not allowed."}, "Not allowed."),
        ({"message": "Group not found"}, "Group not found"),
        ({"detail": "first", "message": "second"}, "first"),
        ({"card_number": ["This field is required."]}, "API request failed"),
    ],
)
def test_error_message_comes_from_body(http_client, fake_session, body, expected):
    fake_session.add("POST", "/cards/", make_response(400, body))

    with pytest.raises(ApiHttpError) as exc_info:
        http_client.send(RequestDescriptor("POST", "/cards/", body={}))

    assert str(exc_info.value) == expected
    assert exc_info.value.status_code == 400
    assert exc_info.value.body == body


def test_unparseable_error_body_falls_back_to_reason(http_client, fake_session):
    fake_session.add("GET", "/orders/", make_response(502, content=b"Bad gateway page"))

    with pytest.raises(ApiHttpError) as exc_info:
        http_client.send(RequestDescriptor("GET", "/orders/"))

    assert str(exc_info.value) == "Bad Gateway"
    assert exc_info.value.status_code == 502


def test_401_raises_unauthorized_error(http_client, fake_session):
    fake_session.add("GET", "/auth/user/", make_response(401, {"detail": "Token is invalid"}))

    with pytest.raises(UnauthorizedError, match="Token is invalid") as exc_info:
        http_client.send(RequestDescriptor("GET", "/auth/user/"))

    assert exc_info.value.status_code == 401


def test_transport_failure_is_wrapped(http_client, fake_session):
    fake_session.add("GET", "/orders/", requests.ConnectionError("connection refused"))

    with pytest.raises(ApiConnectionError) as exc_info:
        http_client.send(RequestDescriptor("GET", "/orders/"))

    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_unknown_method_is_rejected(http_client, fake_session):
    with pytest.raises(ValueError):
        http_client.send(RequestDescriptor("PUT", "/orders/1/"))

    assert fake_session.calls == []


def test_multipart_request_sends_files_and_form_fields(http_client, fake_session):
    fake_session.add("POST", "/drivers/", make_response(201, {"id": 5}))
    files = {"car_photo": ("car.jpg", b"jpeg-bytes")}

    http_client.send(RequestDescriptor("POST", "/drivers/", body={"user_id": "3"}, files=files))

    call = fake_session.calls[0]
    assert call.files == files
    assert call.data == {"user_id": "3"}
    assert call.json is None
