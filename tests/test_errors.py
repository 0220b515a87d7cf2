"""Tests for wstrust.errors -- exception hierarchy."""

import pickle

from wstrust.errors import (
    ConfigError,
    ConnectionInitError,
    InvalidActionError,
    MalformedTemplateError,
    MessageBuildError,
    TransportError,
    TrustStoreError,
    WSTrustError,
)


def test_base_is_exception():
    assert issubclass(WSTrustError, Exception)


def test_all_errors_inherit_base():
    for cls in (
        ConfigError,
        ConnectionInitError,
        InvalidActionError,
        MalformedTemplateError,
        MessageBuildError,
        TransportError,
        TrustStoreError,
    ):
        assert issubclass(cls, WSTrustError)


def test_trust_store_error_is_connection_init_error():
    assert issubclass(TrustStoreError, ConnectionInitError)


def test_malformed_template_is_message_build_error():
    assert issubclass(MalformedTemplateError, MessageBuildError)


def test_cause_is_preserved():
    try:
        try:
            raise OSError("boom")
        except OSError as e:
            raise ConnectionInitError("cannot connect") from e
    except WSTrustError as err:
        assert isinstance(err.__cause__, OSError)
        assert str(err) == "cannot connect"


def test_transport_error_status_default():
    e = TransportError("failed")
    assert e.status is None
    assert str(e) == "failed"


def test_transport_error_pickle_roundtrip():
    e = TransportError("HTTP 404", status=404)
    restored = pickle.loads(pickle.dumps(e))
    assert isinstance(restored, TransportError)
    assert str(restored) == "HTTP 404"
    assert restored.status == 404


def test_transport_error_setstate_none():
    e = TransportError("x", status=502)
    e.__setstate__(None)
    assert e.status == 502
