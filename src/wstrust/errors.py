"""wstrust error types."""

from __future__ import annotations

from typing import Any

__all__ = [
    "ConfigError",
    "ConnectionInitError",
    "InvalidActionError",
    "MalformedTemplateError",
    "MessageBuildError",
    "TransportError",
    "TrustStoreError",
    "WSTrustError",
]


class WSTrustError(Exception):
    """Base error for WS-Trust client operations.

    Internal failures are re-raised as a subclass of this type with the
    original exception chained as ``__cause__``.
    """


class InvalidActionError(WSTrustError):
    """Unknown action, or Renew/Validate without a token identifier."""


class ConnectionInitError(WSTrustError):
    """The connection to the STS could not be set up."""


class TrustStoreError(ConnectionInitError):
    """The configured trust store cannot be read or decrypted."""


class MessageBuildError(WSTrustError):
    """A SOAP message could not be built from XML text."""


class MalformedTemplateError(MessageBuildError):
    """An interpolated request template is not a valid SOAP 1.2 envelope."""


class TransportError(WSTrustError):
    """Failure while sending the request or receiving the response.

    Args:
        message: Human-readable error description.
        status: HTTP status code, if the server answered at all.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def __reduce__(self) -> tuple[type[TransportError], tuple[str], dict[str, int | None]]:
        """Preserve status across pickle/unpickle."""
        return (type(self), (str(self),), {"status": self.status})

    def __setstate__(self, state: dict[str, Any] | None) -> None:
        if state is None:
            return
        self.status = state.get("status")


class ConfigError(WSTrustError):
    """Configuration validation error."""
