"""
wstrust -- WS-Trust client for Security Token Services.

Builds RequestSecurityToken SOAP 1.2 envelopes for the Issue, Renew and
Validate bindings and sends them to an STS over HTTPS.
"""

from __future__ import annotations

from .actions import Action, IssueRequest, RenewRequest, TokenRequest, ValidateRequest
from .api import invoke, issue_token, renew_token, validate_token
from .client import WSTrustClient
from .config.settings import ClientSettings
from .constants import __version__
from .errors import (
    ConfigError,
    ConnectionInitError,
    InvalidActionError,
    MalformedTemplateError,
    MessageBuildError,
    TransportError,
    TrustStoreError,
    WSTrustError,
)
from .network.message import SoapMessage, SoapResponse
from .timestamps import TimestampPair, generate_timestamps

__all__ = [
    "Action",
    "ClientSettings",
    "ConfigError",
    "ConnectionInitError",
    "InvalidActionError",
    "IssueRequest",
    "MalformedTemplateError",
    "MessageBuildError",
    "RenewRequest",
    "SoapMessage",
    "SoapResponse",
    "TimestampPair",
    "TokenRequest",
    "TransportError",
    "TrustStoreError",
    "ValidateRequest",
    "WSTrustClient",
    "WSTrustError",
    "__version__",
    "generate_timestamps",
    "invoke",
    "issue_token",
    "renew_token",
    "validate_token",
]
