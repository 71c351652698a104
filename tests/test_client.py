"""Tests for the low-level HTTP client: encoding, envelope and error mapping."""

import io
import urllib.error

import pytest
from conftest import BASE_URL, failed, ok

from vtiger_cli.core.client import APIClient, RemoteOperationError, TransportError, ValidationError
from vtiger_cli.core.types import ClientConfig, VtigerResponse


@pytest.fixture
def api() -> APIClient:
    return APIClient(ClientConfig(base_url=BASE_URL + "/", username="admin", access_key="k"))


def test_webservice_url_strips_trailing_slash(api):
    assert api.webservice_url == "https://crm.example.com/webservice.php"


def test_get_encodes_query_and_drops_none(api, transport):
    transport.queue(ok([]))
    api.get({"operation": "query", "sessionName": None, "query": "SELECT * FROM Leads;"})

    req = transport.last
    assert req.method == "GET"
    assert req.url == "https://crm.example.com/webservice.php"
    assert req.query == {"operation": "query", "query": "SELECT * FROM Leads;"}


def test_post_sends_form_body(api, transport):
    transport.queue(ok({}))
    api.post({"operation": "delete", "sessionName": "s", "id": "4x1"})

    req = transport.last
    assert req.method == "POST"
    assert req.query == {}
    assert req.form == {"operation": "delete", "sessionName": "s", "id": "4x1"}
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"


def test_success_envelope_is_returned_unchanged(api, transport):
    payload = {"success": True, "result": {"id": "4x1", "lastname": "Doe"}, "extra": 1}
    transport.queue(payload)
    assert api.get({"operation": "retrieve"}) == payload


def test_failed_envelope_raises_with_remote_message(api, transport):
    transport.queue(failed("Permission to perform the operation is denied", code="ACCESS_DENIED"))

    with pytest.raises(RemoteOperationError) as exc:
        api.get({"operation": "retrieve"})

    assert exc.value.message == "Permission to perform the operation is denied"
    assert exc.value.code == "ACCESS_DENIED"
    assert exc.value.to_dict()["code"] == "ACCESS_DENIED"


def test_failed_envelope_without_message_uses_fallback(api, transport):
    transport.queue({"success": False})

    with pytest.raises(RemoteOperationError, match="Operation failed: listtypes"):
        api.get({"operation": "listtypes"})


def test_http_error_maps_to_transport_error(api, transport):
    transport.queue(
        urllib.error.HTTPError(BASE_URL, 500, "Internal Server Error", {}, io.BytesIO(b"<html>oops</html>"))
    )

    with pytest.raises(TransportError) as exc:
        api.get({"operation": "listtypes"})
    assert exc.value.status == 500


def test_connection_error_maps_to_transport_error(api, transport):
    transport.queue(urllib.error.URLError("Name or service not known"))

    with pytest.raises(TransportError, match="Connection error"):
        api.post({"operation": "logout"})


def test_invalid_json_maps_to_transport_error(api, transport):
    transport.queue(b"<html>not json</html>")

    with pytest.raises(TransportError, match="Invalid response body"):
        api.get({"operation": "listtypes"})


def test_non_utf8_body_maps_to_transport_error(api, transport):
    transport.queue(b"\xff\xfe not utf-8")

    with pytest.raises(TransportError, match="Invalid response body"):
        api.get({"operation": "listtypes"})


def test_missing_url_raises_before_request(transport):
    api = APIClient(ClientConfig())

    with pytest.raises(ValidationError):
        api.get({"operation": "listtypes"})
    assert transport.requests == []


def test_response_envelope_parsing():
    envelope = VtigerResponse.from_dict(failed("Invalid session", code="INVALID_SESSIONID"))
    assert envelope.success is False
    assert envelope.error.code == "INVALID_SESSIONID"
    assert envelope.error.message == "Invalid session"

    envelope = VtigerResponse.from_dict(ok({"types": ["Leads"]}))
    assert envelope.success is True
    assert envelope.result == {"types": ["Leads"]}
    assert envelope.error is None


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("VTIGER_URL", "https://env.example.com/")
    monkeypatch.setenv("VTIGER_USERNAME", "envuser")
    monkeypatch.setenv("VTIGER_ACCESS_KEY", "envkey")

    config = ClientConfig.from_env(username="explicit")

    assert config.base_url == "https://env.example.com"
    assert config.username == "explicit"
    assert config.access_key == "envkey"
    assert "envkey" not in repr(config)
