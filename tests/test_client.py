"""End-to-end tests for the client facade over a mock httpx transport."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl

import httpx
import pytest

from conftest import RecordingTransport
from pph_api.client import Command, PPHApi
from pph_api.config import Settings
from pph_api.errors import (
    MalformedResponseError,
    TransportError,
    UnknownOperationError,
    ValidationError,
)

USER_LIST_BODY = (
    '{"data":[{"fname":"Tom"},{"fname":"awardwinner"},{"fname":"Social"}],'
    '"count":630330,"page":1,"pageCount":20,'
    '"nextUrl":"https:\\/\\/api.peopleperhour.com\\/v1\\/user?a=fname&sort=rating&page=2",'
    '"previousUrl":null}'
)


def test_user_view(make_api) -> None:
    transport = RecordingTransport('{"data":{"job_title":"Web Developer"}}')
    api = make_api(transport)

    assert api.api_id == "dummyID"
    assert api.api_key == "dummyKey"
    assert api.base_url == "https://api.peopleperhour.com/"

    result = api.user({"id": 12345})
    assert result["data"]["job_title"] == "Web Developer"
    assert result.code == 200

    request = transport.last
    assert request.method == "GET"
    assert request.url.path == "/v1/user/12345"
    assert request.url.host == "api.peopleperhour.com"
    assert request.url.params["app_id"] == "dummyID"
    assert request.url.params["app_key"] == "dummyKey"

    api.user(id=21561, a="cert")
    assert transport.last.url.params["a"] == "cert"


def test_get_command_and_execute(make_api) -> None:
    api = make_api(RecordingTransport('{"data":{"job_title":"Web Developer"}}'))

    command = api.get_command("user", {"id": 12345})
    assert isinstance(command, Command)
    assert command.name == "User"

    result = api.execute(command)
    assert result["code"] == 200

    with pytest.raises(UnknownOperationError, match="No operation found named thisShouldNotExist"):
        api.get_command("thisShouldNotExist")


def test_user_list(make_api) -> None:
    transport = RecordingTransport(USER_LIST_BODY)
    api = make_api(transport)

    response = api.user_list()
    assert len(response["data"]) == 3
    assert response.data[0].fname == "Tom"
    assert response.previousUrl is None
    assert list(transport.last.url.params.keys()) == ["app_id", "app_key"]

    api.user_list({"page": 2, "sort": "fname.desc"})
    assert parse_qsl(transport.last.url.query.decode()) == [
        ("app_id", "dummyID"),
        ("app_key", "dummyKey"),
        ("page", "2"),
        ("sort", "fname.desc"),
    ]


def test_is_guest(make_api) -> None:
    api = make_api(RecordingTransport('{"isGuest":true,"id":null}'))
    assert api.is_guest()["isGuest"] is True

    api = make_api(RecordingTransport('{"isGuest":false,"id":1234}'))
    result = api.is_guest()
    assert result.isGuest is False
    assert result.id == 1234


def test_is_member(make_api) -> None:
    transport = RecordingTransport('{"id":1234}')
    api = make_api(transport)

    response = api.is_member({"email": "dummyEncryptedEmailAddress"})
    assert response["id"] == 1234
    assert transport.last.url.params["email"] == "dummyEncryptedEmailAddress"


def test_hourlie_list(make_api) -> None:
    transport = RecordingTransport(
        '{"data":[{"title":"Test Hourlie Title 1"},{"fname":"Test Hourlie Title 2"}]}'
    )
    api = make_api(transport)

    response = api.hourlie_list(
        {"a": "title", "f[q]": "php", "f[min_price]": 10.00, "f[max_price]": 50, "f[ids]": [1, 2, 3]}
    )
    assert response["data"][0]["title"] == "Test Hourlie Title 1"

    params = transport.last.url.params
    assert params["f[q]"] == "php"
    assert params["f[max_price]"] == "50"
    assert params["f[ids]"] == "1,2,3"
    assert params.get_list("f[ids]") == ["1,2,3"]

    with pytest.raises(ValidationError, match=r"\[f\[min_price\]\] must be of type numeric"):
        api.hourlie_list({"a": "title", "f[q]": "php", "f[min_price]": "hello"})


def test_validation_failure_sends_nothing(make_api) -> None:
    transport = RecordingTransport()
    api = make_api(transport)

    with pytest.raises(ValidationError):
        api.is_member()
    with pytest.raises(UnknownOperationError):
        api.call("thisShouldNotExist")

    assert transport.requests == []


def test_user_login_posts_form_body(make_api) -> None:
    transport = RecordingTransport('{"id":1234,"isGuest":false}')
    api = make_api(transport)

    result = api.user_login({"email": "me@example.com", "password": "s3cret"})
    assert result.id == 1234

    request = transport.last
    assert request.method == "POST"
    assert request.url.path == "/v1/user/login"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert parse_qsl(request.content.decode()) == [("email", "me@example.com"), ("password", "s3cret")]
    assert "password" not in request.url.params


def test_credentials_are_read_at_call_time(make_api) -> None:
    transport = RecordingTransport('{"isGuest":true}')
    api = make_api(transport)

    api.api_id = "rotatedID"
    api.api_key = "rotatedKey"
    api.is_guest()

    assert transport.last.url.params["app_id"] == "rotatedID"
    assert transport.last.url.params["app_key"] == "rotatedKey"


def test_missing_credentials_fail_validation(make_api) -> None:
    api = make_api(RecordingTransport())
    api.api_key = None
    with pytest.raises(ValidationError, match=r"\[app_key\] is required"):
        api.is_guest()


def test_custom_base_url(make_api) -> None:
    transport = RecordingTransport("{}")
    api = make_api(transport, base_url="http://localhost:8080/")
    api.is_guest()
    assert str(transport.last.url).startswith("http://localhost:8080/v1/user/isguest?")


def test_connection_failure_is_transport_error(make_api) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    api = make_api(RecordingTransport(handler=refuse))
    with pytest.raises(TransportError, match="Connection refused") as excinfo:
        api.is_guest()
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.status_code is None


def test_timeout_is_transport_error(make_api) -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    api = make_api(RecordingTransport(handler=slow))
    with pytest.raises(TransportError, match="timed out"):
        api.user_list()


def test_error_status_is_transport_error(make_api) -> None:
    api = make_api(RecordingTransport('{"error":"Invalid app key"}', status_code=401))
    with pytest.raises(TransportError) as excinfo:
        api.user({"id": 1})
    assert excinfo.value.status_code == 401
    assert excinfo.value.body == '{"error":"Invalid app key"}'
    assert not isinstance(excinfo.value, ValidationError)


def test_malformed_body_is_reported(make_api) -> None:
    api = make_api(RecordingTransport("<html>maintenance</html>"))
    with pytest.raises(MalformedResponseError):
        api.is_guest()


def _login_then_check(transport: RecordingTransport, make_api, persist: bool) -> PPHApi:
    api = make_api(transport, persist_cookies=persist)
    api.user_login({"email": "me@example.com", "password": "s3cret"})
    api.is_guest()
    return api


def _session_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/v1/user/login":
        return httpx.Response(200, headers={"Set-Cookie": "PHPSESSID=abc123; Path=/"}, json={"id": 1})
    return httpx.Response(200, json={"isGuest": "PHPSESSID=abc123" not in request.headers.get("cookie", "")})


def test_cookies_persist_when_enabled(make_api) -> None:
    transport = RecordingTransport(handler=_session_handler)
    _login_then_check(transport, make_api, persist=True)
    assert "PHPSESSID=abc123" in transport.last.headers.get("cookie", "")


def test_cookies_dropped_by_default(make_api) -> None:
    transport = RecordingTransport(handler=_session_handler)
    api = _login_then_check(transport, make_api, persist=False)
    assert "cookie" not in transport.last.headers
    assert len(api.http.cookies) == 0


def test_from_settings_uses_configuration() -> None:
    settings = Settings(
        api_id="envID",
        api_key="envKey",
        api_base_url="http://sandbox.local/",
        persist_cookies=True,
    )
    transport = RecordingTransport('{"isGuest":true}')
    with httpx.Client(transport=transport) as http:
        api = PPHApi.from_settings(settings, client=http)
        assert api.persist_cookies is True
        api.is_guest()

    assert transport.last.url.host == "sandbox.local"
    assert transport.last.url.params["app_id"] == "envID"


def test_owned_client_is_closed_on_exit() -> None:
    with PPHApi("dummyID", "dummyKey") as api:
        http = api.http
        assert http.headers["accept"] == "application/json"
    assert http.is_closed


def test_external_client_is_left_open(make_api) -> None:
    api = make_api(RecordingTransport())
    api.close()
    assert not api.http.is_closed


def test_cookie_reset_keeps_cookies_the_caller_already_had(make_api) -> None:
    transport = RecordingTransport(handler=_session_handler)
    api = make_api(transport)
    api.http.cookies.set("tracking", "keep-me", domain="example.com")

    api.user_login({"email": "me@example.com", "password": "s3cret"})

    assert api.http.cookies.get("tracking", domain="example.com") == "keep-me"
    assert api.http.cookies.get("PHPSESSID") is None


def test_one_info_record_per_call(make_api, caplog: pytest.LogCaptureFixture) -> None:
    api = make_api(RecordingTransport('{"isGuest":true}'))

    with caplog.at_level(logging.INFO, logger="pph_api"):
        api.is_member({"email": "me@example.com"})

    info = [r for r in caplog.records if r.name.startswith("pph_api") and r.levelno == logging.INFO]
    assert len(info) == 1
    assert "me@example.com" not in caplog.text
