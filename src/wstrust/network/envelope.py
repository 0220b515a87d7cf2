"""WS-Trust RequestSecurityToken envelope templates.

Each template is a complete SOAP 1.2 envelope.  The three RST bodies
differ only in the request type, token type and target/lifetime elements;
the header (addressing + WS-Security timestamp) is shared.
"""

from __future__ import annotations

__all__ = [
    "build_issue_envelope",
    "build_renew_envelope",
    "build_request_envelope",
    "build_validate_envelope",
    "xml_escape",
]

from typing import TYPE_CHECKING
from xml.sax.saxutils import escape as _xml_escape

from ..actions import Action, IssueRequest, RenewRequest, ValidateRequest
from ..constants import (
    NS_SOAP12,
    NS_WSA,
    NS_WSSE,
    NS_WST,
    NS_WSU,
    TOKEN_TYPE_SAML2,
    TOKEN_TYPE_STATUS,
)
from ..errors import InvalidActionError

if TYPE_CHECKING:
    from ..actions import TokenRequest
    from ..timestamps import TimestampPair

_PASSWORD_TEXT_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-username-token-profile-1.0"
    "#PasswordText"
)
_SAML2_ID_VALUE_TYPE = "http://docs.oasis-open.org/wss/oasis-wss-saml-token-profile-1.1#SAMLID"


def xml_escape(s: str) -> str:
    """Escape XML special characters in user input."""
    return _xml_escape(s, {'"': "&quot;", "'": "&apos;"})


def _username_token(username: str | None, password: str | None) -> str:
    if not username:
        return ""
    return f"""
      <wsse:UsernameToken wsu:Id="UsernameToken-1">
        <wsse:Username>{xml_escape(username)}</wsse:Username>
        <wsse:Password Type="{_PASSWORD_TEXT_TYPE}">{xml_escape(password or "")}</wsse:Password>
      </wsse:UsernameToken>"""


def _build_soap_envelope(
    action: Action,
    endpoint_url: str,
    created: str,
    expires: str,
    rst_content: str,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """
    Build a SOAP 1.2 envelope around an RST body.

    The timestamps are inserted both in the WS-Security header and, where
    the template includes one, the RST ``Lifetime``.  All strings are
    XML-escaped internally; callers do NOT need to escape them.

    Args:
        action: Action the envelope requests (sets the wsa:Action header).
        endpoint_url: STS endpoint (wsa:To header).
        created: Creation timestamp.
        expires: Expiry timestamp.
        rst_content: XML fragment placed inside ``wst:RequestSecurityToken``.
        username: Optional UsernameToken user.
        password: Optional UsernameToken password.

    Returns:
        Complete SOAP envelope as string.
    """
    return f"""\
<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="{NS_SOAP12}"
               xmlns:wsa="{NS_WSA}"
               xmlns:wsse="{NS_WSSE}"
               xmlns:wsu="{NS_WSU}"
               xmlns:wst="{NS_WST}">
  <soap:Header>
    <wsa:Action>{xml_escape(action.soap_action)}</wsa:Action>
    <wsa:To>{xml_escape(endpoint_url)}</wsa:To>
    <wsse:Security soap:mustUnderstand="true">
      <wsu:Timestamp wsu:Id="Timestamp-1">
        <wsu:Created>{xml_escape(created)}</wsu:Created>
        <wsu:Expires>{xml_escape(expires)}</wsu:Expires>
      </wsu:Timestamp>{_username_token(username, password)}
    </wsse:Security>
  </soap:Header>
  <soap:Body>
    <wst:RequestSecurityToken>
{rst_content}
    </wst:RequestSecurityToken>
  </soap:Body>
</soap:Envelope>"""


def _lifetime(created: str, expires: str) -> str:
    return f"""\
      <wst:Lifetime>
        <wsu:Created>{xml_escape(created)}</wsu:Created>
        <wsu:Expires>{xml_escape(expires)}</wsu:Expires>
      </wst:Lifetime>"""


def _token_reference(token_id: str) -> str:
    return f"""\
        <wsse:SecurityTokenReference>
          <wsse:KeyIdentifier ValueType="{_SAML2_ID_VALUE_TYPE}">{xml_escape(token_id)}</wsse:KeyIdentifier>
        </wsse:SecurityTokenReference>"""


def build_issue_envelope(
    endpoint_url: str,
    created: str,
    expires: str,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """Build an RST envelope requesting a new SAML 2.0 token."""
    content = f"""\
      <wst:TokenType>{TOKEN_TYPE_SAML2}</wst:TokenType>
      <wst:RequestType>{Action.ISSUE.request_type}</wst:RequestType>
{_lifetime(created, expires)}"""
    return _build_soap_envelope(
        Action.ISSUE, endpoint_url, created, expires, content, username, password
    )


def build_renew_envelope(
    endpoint_url: str,
    created: str,
    expires: str,
    token_id: str,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """Build an RST envelope renewing the token identified by ``token_id``."""
    content = f"""\
      <wst:TokenType>{TOKEN_TYPE_SAML2}</wst:TokenType>
      <wst:RequestType>{Action.RENEW.request_type}</wst:RequestType>
      <wst:RenewTarget>
{_token_reference(token_id)}
      </wst:RenewTarget>
{_lifetime(created, expires)}"""
    return _build_soap_envelope(
        Action.RENEW, endpoint_url, created, expires, content, username, password
    )


def build_validate_envelope(
    endpoint_url: str,
    created: str,
    expires: str,
    token_id: str,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """Build an RST envelope asking for the status of ``token_id``.

    Validation has no lifetime of its own; the timestamps only appear in
    the security header.
    """
    content = f"""\
      <wst:TokenType>{TOKEN_TYPE_STATUS}</wst:TokenType>
      <wst:RequestType>{Action.VALIDATE.request_type}</wst:RequestType>
      <wst:ValidateTarget>
{_token_reference(token_id)}
      </wst:ValidateTarget>"""
    return _build_soap_envelope(
        Action.VALIDATE, endpoint_url, created, expires, content, username, password
    )


def build_request_envelope(
    request: TokenRequest,
    endpoint_url: str,
    timestamps: TimestampPair,
    username: str | None = None,
    password: str | None = None,
) -> str:
    """
    Select the template for ``request`` and fill it in.

    Raises:
        InvalidActionError: If ``request`` is not one of the known variants.
    """
    created, expires = timestamps.created, timestamps.expires
    if isinstance(request, IssueRequest):
        return build_issue_envelope(endpoint_url, created, expires, username, password)
    if isinstance(request, RenewRequest):
        return build_renew_envelope(
            endpoint_url, created, expires, request.token_id, username, password
        )
    if isinstance(request, ValidateRequest):
        return build_validate_envelope(
            endpoint_url, created, expires, request.token_id, username, password
        )
    raise InvalidActionError(
        f"Unsupported request {request!r}. Operations of type Issue, Renew and Validate are allowed."
    )
