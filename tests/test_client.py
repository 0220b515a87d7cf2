"""Tests for wstrust.client -- request building, dispatch, and send lifecycle."""

from __future__ import annotations

import datetime
import re
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from wstrust.actions import Action, IssueRequest, RenewRequest, ValidateRequest
from wstrust.client import WSTrustClient
from wstrust.config.settings import ClientSettings
from wstrust.errors import (
    ConnectionInitError,
    InvalidActionError,
    MalformedTemplateError,
    TransportError,
    TrustStoreError,
)
from wstrust.network.message import SoapMessage

_CREATED = re.compile(rb"<wsu:Created>([^<]+)</wsu:Created>")
_EXPIRES = re.compile(rb"<wsu:Expires>([^<]+)</wsu:Expires>")
_KEY_ID = re.compile(rb"<wsse:KeyIdentifier[^>]*>([^<]+)</wsse:KeyIdentifier>")
_BODY = re.compile(rb"<soap:Body>.*</soap:Body>", re.DOTALL)


def _self_signed_der() -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "STS Root CA")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(Encoding.DER)


@pytest.fixture
def client(settings, fixed_clock):
    return WSTrustClient(settings, clock=fixed_clock)


# ── build_request ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("request_obj", "token"),
    [
        (IssueRequest(), None),
        (RenewRequest("renew-token-1"), b"renew-token-1"),
        (ValidateRequest("validate-token-2"), b"validate-token-2"),
    ],
)
def test_build_request_contains_exactly_generated_values(client, request_obj, token):
    message = client.build_request(request_obj)

    assert set(_CREATED.findall(message.raw)) == {b"2024-03-01T12:30:45.678Z"}
    assert set(_EXPIRES.findall(message.raw)) == {b"2024-03-01T12:35:45.678Z"}
    if token is None:
        assert _KEY_ID.findall(message.raw) == []
    else:
        assert _KEY_ID.findall(message.raw) == [token]
    assert message.soap_action == request_obj.action.soap_action


def test_build_request_templates_do_not_mix(client):
    issue = client.build_request(IssueRequest()).raw
    renew = client.build_request(RenewRequest("t-1")).raw
    validate = client.build_request(ValidateRequest("t-2")).raw

    assert b"RenewTarget" not in issue
    assert b"ValidateTarget" not in issue
    assert b"ValidateTarget" not in renew
    assert b"t-2" not in renew
    assert b"RenewTarget" not in validate
    assert b"t-1" not in validate


def test_build_request_fresh_timestamps_per_call(settings):
    moments = iter(
        [
            datetime.datetime(2024, 1, 1, 0, 0, 0, tzinfo=datetime.timezone.utc),
            datetime.datetime(2024, 1, 1, 0, 0, 1, tzinfo=datetime.timezone.utc),
        ]
    )
    client = WSTrustClient(settings, clock=lambda: next(moments))
    first = client.build_request(IssueRequest())
    second = client.build_request(IssueRequest())
    assert b"2024-01-01T00:00:00.000Z" in first.raw
    assert b"2024-01-01T00:00:01.000Z" in second.raw


def test_build_request_uses_settings_credentials(fixed_clock):
    settings = ClientSettings(
        endpoint_url="https://sts.example.com/sts", username="alice", password="secret"
    )
    message = WSTrustClient(settings, clock=fixed_clock).build_request(IssueRequest())
    assert b"<wsse:Username>alice</wsse:Username>" in message.raw


def test_build_request_unknown_request(client):
    with pytest.raises(InvalidActionError):
        client.build_request("Cancel")  # type: ignore[arg-type]


def test_build_request_malformed_template(client):
    with (
        patch("wstrust.client.build_request_envelope", return_value="<soap:Envelope"),
        pytest.raises(MalformedTemplateError, match="Issue request template") as exc_info,
    ):
        client.build_request(IssueRequest())
    assert exc_info.value.__cause__ is not None


# ── invoke dispatch ──────────────────────────────────────────────────


def test_invoke_unknown_action_makes_no_network_call(client, fake_sts):
    with pytest.raises(InvalidActionError):
        client.invoke("Cancel")
    assert fake_sts.connections == []


@pytest.mark.parametrize("action", ["Renew", "Validate"])
def test_invoke_missing_token_makes_no_network_call(client, fake_sts, action):
    with pytest.raises(InvalidActionError):
        client.invoke(action)
    assert fake_sts.connections == []


def test_invoke_issue_ignores_extra_parameters(client, fake_sts):
    client.invoke("Issue", "unexpected", "values")
    body = fake_sts.requests[0]["body"]
    assert b"/ws-trust/200512/Issue</wst:RequestType>" in body
    assert b"unexpected" not in body
    assert b"values" not in body


def test_invoke_renew_uses_first_parameter(client, fake_sts):
    client.invoke(Action.RENEW, "first", "second")
    body = fake_sts.requests[0]["body"]
    assert _KEY_ID.findall(body) == [b"first"]


# ── send ─────────────────────────────────────────────────────────────


def test_issue_round_trip_body_unchanged(client, fake_sts):
    """The echo STS returns the request Body; the client must not alter it."""
    response = client.invoke("Issue")

    sent = SoapMessage.from_bytes(fake_sts.requests[0]["body"])
    assert response.status == 200
    sent_body = _BODY.search(fake_sts.requests[0]["body"])
    received_body = _BODY.search(response.raw)
    assert sent_body is not None
    assert received_body is not None
    assert received_body.group(0) == sent_body.group(0)
    assert response.message.body_xml() == sent.body_xml()


def test_send_opens_one_connection_and_closes_it(client, fake_sts):
    client.send(ValidateRequest("tok"))
    assert len(fake_sts.connections) == 1
    assert fake_sts.connections[0].closed


def test_send_closes_connection_on_transport_error(client, fake_sts):
    fake_sts.request_error = OSError("network down")
    with pytest.raises(TransportError) as exc_info:
        client.send(IssueRequest())
    assert isinstance(exc_info.value.__cause__, OSError)
    assert fake_sts.connections[0].closed


def test_send_closes_connection_on_http_error(client, fake_sts):
    fake_sts.status = 503
    fake_sts.content_type = "text/html"
    fake_sts.body = b"unavailable"
    with pytest.raises(TransportError):
        client.send(IssueRequest())
    assert fake_sts.connections[0].closed


def test_send_build_error_opens_no_connection(client, fake_sts):
    with (
        patch("wstrust.client.build_request_envelope", return_value="not xml"),
        pytest.raises(MalformedTemplateError),
    ):
        client.send(IssueRequest())
    assert fake_sts.connections == []


def test_send_connection_init_error(client, fake_sts):
    fake_sts.connect_error = ConnectionRefusedError("refused")
    with pytest.raises(ConnectionInitError):
        client.send(IssueRequest())
    assert fake_sts.connections[0].closed


def test_send_trust_store_error_before_connecting(fake_sts, fixed_clock, tmp_path):
    settings = ClientSettings(
        endpoint_url="https://sts.example.com/sts",
        trust_store_path=str(tmp_path / "missing.pem"),
    )
    with pytest.raises(TrustStoreError):
        WSTrustClient(settings, clock=fixed_clock).send(IssueRequest())
    assert fake_sts.connections == []


def test_send_trust_store_with_trailing_bytes(fake_sts, fixed_clock, tmp_path):
    store = tmp_path / "ca.der"
    store.write_bytes(_self_signed_der() + b"\x00\x00")
    settings = ClientSettings(
        endpoint_url="https://sts.example.com/sts", trust_store_path=str(store)
    )
    with pytest.raises(TrustStoreError):
        WSTrustClient(settings, clock=fixed_clock).send(IssueRequest())
    assert fake_sts.connections == []


def test_send_uses_settings_timeout(client, fake_sts, settings):
    client.send(IssueRequest())
    assert fake_sts.connections[0].timeout == settings.timeout


def test_clients_are_independent(fake_sts, fixed_clock):
    a = WSTrustClient(ClientSettings(endpoint_url="https://a.example.com/sts"), fixed_clock)
    b = WSTrustClient(ClientSettings(endpoint_url="https://b.example.com/sts"), fixed_clock)
    a.invoke("Issue")
    b.invoke("Issue")
    assert [c.host for c in fake_sts.connections] == ["a.example.com", "b.example.com"]
