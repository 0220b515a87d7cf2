"""Shared test fixtures for the wstrust test suite."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from unittest.mock import patch

import pytest

from wstrust.constants import NS_SOAP12, NS_WSSE, NS_WST, NS_WSU

FIXED_NOW = datetime.datetime(2024, 3, 1, 12, 30, 45, 678901, tzinfo=datetime.timezone.utc)

STS_URL = "https://sts.example.com:9443/services/wso2carbon-sts"

_BODY_PATTERN = re.compile(rb"<soap:Body>.*</soap:Body>", re.DOTALL)


def echo_envelope(request_body: bytes) -> bytes:
    """Wrap the Body of a request envelope into a fresh response envelope."""
    match = _BODY_PATTERN.search(request_body)
    assert match is not None, "request has no soap:Body"
    return (
        f'<soap:Envelope xmlns:soap="{NS_SOAP12}" xmlns:wst="{NS_WST}" '
        f'xmlns:wsse="{NS_WSSE}" xmlns:wsu="{NS_WSU}">'
    ).encode() + match.group(0) + b"</soap:Envelope>"


class FakeHTTPResponse:
    def __init__(self, status: int, content_type: str, body: bytes) -> None:
        self.status = status
        self._content_type = content_type
        self._body = body
        self._pos = 0

    def getheader(self, name: str, default: str | None = None) -> str | None:
        if name.lower() == "content-type":
            return self._content_type
        return default

    def read(self, amt: int = -1) -> bytes:
        end = len(self._body) if amt < 0 else self._pos + amt
        chunk = self._body[self._pos : end]
        self._pos += len(chunk)
        return chunk


@dataclass
class FakeSTS:
    """Controls the fake HTTPSConnection and records what it saw."""

    status: int = 200
    content_type: str = "application/soap+xml; charset=utf-8"
    body: bytes | None = None  # None = echo the request Body
    connect_error: BaseException | None = None
    request_error: BaseException | None = None
    connections: list[FakeHTTPSConnection] = field(default_factory=list)

    @property
    def requests(self) -> list[dict[str, object]]:
        return [req for conn in self.connections for req in conn.requests]


class FakeHTTPSConnection:
    sts: FakeSTS

    def __init__(self, host, port=None, timeout=None, context=None) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.context = context
        self.requests: list[dict[str, object]] = []
        self.connected = False
        self.closed = False
        self.sts.connections.append(self)

    def connect(self) -> None:
        if self.sts.connect_error is not None:
            raise self.sts.connect_error
        self.connected = True

    def request(self, method, url, body=None, headers=None) -> None:
        if self.sts.request_error is not None:
            raise self.sts.request_error
        self.requests.append({"method": method, "url": url, "body": body, "headers": headers})

    def getresponse(self) -> FakeHTTPResponse:
        body = self.sts.body
        if body is None:
            body = echo_envelope(self.requests[-1]["body"])  # type: ignore[arg-type]
        return FakeHTTPResponse(self.sts.status, self.sts.content_type, body)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_sts():
    """Replace http.client.HTTPSConnection with an in-memory STS stub."""
    sts = FakeSTS()
    conn_cls = type("BoundFakeHTTPSConnection", (FakeHTTPSConnection,), {"sts": sts})
    with patch("wstrust.network.connection.http.client.HTTPSConnection", conn_cls):
        yield sts


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def settings():
    from wstrust.config.settings import ClientSettings

    return ClientSettings(endpoint_url=STS_URL, timeout=30)


@pytest.fixture
def config_dir(tmp_path):
    """Redirect config to a temp directory and disable the real keyring.

    Use the ``memory_keyring`` fixture to test with an in-memory backend.
    """
    config_file = tmp_path / "config.json"
    with (
        patch("wstrust.config._storage.CONFIG_DIR", tmp_path),
        patch("wstrust.config._storage.CONFIG_FILE", config_file),
        patch("wstrust.config.secrets.CONFIG_FILE", config_file),
        patch("wstrust.config.secrets.is_keyring_available", return_value=False),
    ):
        yield tmp_path, config_file


@pytest.fixture
def memory_keyring(config_dir):
    """In-memory keyring backend (requires ``config_dir``)."""
    store: dict[tuple[str, str], str] = {}

    def _get(service, account):
        return store.get((service, account))

    def _set(service, account, secret):
        store[(service, account)] = secret

    def _delete(service, account):
        from keyring.errors import PasswordDeleteError

        if (service, account) not in store:
            raise PasswordDeleteError("not found")
        del store[(service, account)]

    with (
        patch("wstrust.config.secrets.is_keyring_available", return_value=True),
        patch("wstrust.config.secrets.keyring.get_password", side_effect=_get),
        patch("wstrust.config.secrets.keyring.set_password", side_effect=_set),
        patch("wstrust.config.secrets.keyring.delete_password", side_effect=_delete),
    ):
        yield store


@pytest.fixture
def clean_env(monkeypatch):
    """Remove WSTRUST_* variables inherited from the environment."""
    for name in (
        "WSTRUST_URL",
        "WSTRUST_TIMEOUT",
        "WSTRUST_TRUSTSTORE",
        "WSTRUST_TRUSTSTORE_PASSWORD",
        "WSTRUST_USER",
        "WSTRUST_PASS",
    ):
        monkeypatch.delenv(name, raising=False)
