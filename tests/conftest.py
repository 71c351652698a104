"""Pytest configuration - loads .env for integration tests, fakes the HTTP transport for unit tests."""

import json
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from vtiger_cli.sdk import VtigerClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BASE_URL = "https://crm.example.com"


@dataclass
class RecordedRequest:
    """A request captured by FakeTransport."""

    method: str
    url: str
    query: dict[str, str]
    form: dict[str, str]
    headers: dict[str, str]

    @property
    def params(self) -> dict[str, str]:
        """Query params for GET, form fields for POST."""
        return self.query if self.method == "GET" else self.form


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeTransport:
    """Stands in for urllib.request.urlopen, replaying queued envelopes."""

    responses: list[Any] = field(default_factory=list)
    requests: list[RecordedRequest] = field(default_factory=list)

    def queue(self, *payloads: Any) -> None:
        self.responses.extend(payloads)

    def __call__(self, req: Any, timeout: Any = None) -> FakeResponse:
        parsed = urllib.parse.urlsplit(req.full_url)
        body = req.data.decode("utf-8") if req.data else ""
        self.requests.append(
            RecordedRequest(
                method=req.get_method(),
                url=f"{parsed.scheme}://{parsed.netloc}{parsed.path}",
                query=dict(urllib.parse.parse_qsl(parsed.query)),
                form=dict(urllib.parse.parse_qsl(body)),
                headers={k.lower(): v for k, v in req.header_items()},
            )
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request: {req.get_method()} {req.full_url}")
        payload = self.responses.pop(0)
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, bytes):
            return FakeResponse(payload)
        return FakeResponse(json.dumps(payload).encode("utf-8"))

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


def ok(result: Any) -> dict[str, Any]:
    """A successful envelope."""
    return {"success": True, "result": result}


def failed(message: str | None = None, code: str = "ERROR") -> dict[str, Any]:
    """A failed envelope."""
    error: dict[str, Any] = {"code": code}
    if message is not None:
        error["message"] = message
    return {"success": False, "error": error}


LOGIN_RESULT = {
    "sessionName": "sess-123",
    "userId": "19x1",
    "version": "0.22",
    "vtigerVersion": "7.1.0",
}


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    """Replace urlopen with a recording fake."""
    fake = FakeTransport()
    monkeypatch.setattr("urllib.request.urlopen", fake)
    return fake


@pytest.fixture
def client() -> VtigerClient:
    """A client with explicit credentials, not logged in."""
    return VtigerClient(BASE_URL, "admin", "secretkey")


@pytest.fixture
def logged_in(client: VtigerClient, transport: FakeTransport) -> VtigerClient:
    """A client that has completed login against the fake transport."""
    transport.queue(ok({"token": "tok", "serverTime": 1, "expireTime": 2}), ok(LOGIN_RESULT))
    client.login()
    transport.requests.clear()
    return client
