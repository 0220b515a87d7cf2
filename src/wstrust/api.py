"""High-level convenience API.

Provides :func:`invoke`, :func:`issue_token`, :func:`renew_token` and
:func:`validate_token`, which resolve settings from arguments, environment
variables and the saved config before creating a client.

For lower-level control, create a :class:`~wstrust.client.WSTrustClient`
with explicit :class:`~wstrust.config.settings.ClientSettings`.
"""

from __future__ import annotations

__all__ = ["invoke", "issue_token", "renew_token", "validate_token"]

from typing import TYPE_CHECKING

from .actions import IssueRequest, RenewRequest, ValidateRequest
from .client import WSTrustClient
from .config.settings import resolve_settings

if TYPE_CHECKING:
    from .actions import Action
    from .config.settings import ClientSettings
    from .network.message import SoapResponse


def _client(settings: ClientSettings | None, url: str | None) -> WSTrustClient:
    if settings is None:
        settings = resolve_settings(url=url)
    return WSTrustClient(settings)


def invoke(
    action: str | Action,
    *parameters: str,
    settings: ClientSettings | None = None,
    url: str | None = None,
) -> SoapResponse:
    """
    Send an Issue, Renew or Validate request to the STS.

    Args:
        action: Action name ("Issue", "Renew", "Validate") or :class:`Action`.
        *parameters: Security token identifier for Renew/Validate.
        settings: Explicit settings; resolved from config when omitted.
        url: Endpoint override used when ``settings`` is omitted.

    Returns:
        The raw STS response.

    Raises:
        InvalidActionError: If the action/parameters are invalid.
        WSTrustError: On any other failure.
    """
    return _client(settings, url).invoke(action, *parameters)


def issue_token(
    *, settings: ClientSettings | None = None, url: str | None = None
) -> SoapResponse:
    """Request a new security token."""
    return _client(settings, url).send(IssueRequest())


def renew_token(
    token_id: str, *, settings: ClientSettings | None = None, url: str | None = None
) -> SoapResponse:
    """Renew the security token identified by ``token_id``."""
    return _client(settings, url).send(RenewRequest(token_id))


def validate_token(
    token_id: str, *, settings: ClientSettings | None = None, url: str | None = None
) -> SoapResponse:
    """Validate the security token identified by ``token_id``."""
    return _client(settings, url).send(ValidateRequest(token_id))
