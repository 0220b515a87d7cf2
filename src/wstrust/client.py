"""
WS-Trust client for a Security Token Service.

:class:`WSTrustClient` builds RequestSecurityToken envelopes and sends
them over a fresh SOAP connection per call.  All configuration comes from
the :class:`~wstrust.config.settings.ClientSettings` passed in; the client
keeps no other state and may be created per thread or per test.
"""

from __future__ import annotations

__all__ = ["WSTrustClient"]

import logging
from typing import TYPE_CHECKING

from .actions import parse_request
from .errors import MalformedTemplateError, MessageBuildError
from .network.connection import open_connection
from .network.envelope import build_request_envelope
from .network.message import SoapMessage
from .timestamps import generate_timestamps
from .truststore import create_ssl_context

if TYPE_CHECKING:
    import ssl

    from .actions import Action, TokenRequest
    from .config.settings import ClientSettings
    from .network.message import SoapResponse
    from .timestamps import Clock

_logger = logging.getLogger(__name__)


class WSTrustClient:
    """Client for the Issue, Renew and Validate bindings of an STS.

    Args:
        settings: Endpoint, trust store and credentials.
        clock: Time source for request timestamps (UTC system clock by
            default).
    """

    def __init__(self, settings: ClientSettings, clock: Clock | None = None) -> None:
        self.settings = settings
        self._clock = clock

    def build_request(self, request: TokenRequest) -> SoapMessage:
        """
        Build the SOAP 1.2 RST message for ``request``.

        A new timestamp pair is generated on every call.

        Raises:
            InvalidActionError: If ``request`` is not a known request type.
            MalformedTemplateError: If the filled-in template is not a valid
                SOAP envelope.
        """
        timestamps = generate_timestamps(self._clock)
        envelope = build_request_envelope(
            request,
            self.settings.endpoint_url,
            timestamps,
            username=self.settings.username,
            password=self.settings.password,
        )
        try:
            message = SoapMessage.from_string(envelope)
        except MessageBuildError as e:
            raise MalformedTemplateError(
                f"{request.action.value} request template produced invalid SOAP: {e}"
            ) from e

        _logger.debug(
            "Built %s request: created=%s, expires=%s, %d bytes",
            request.action.value,
            timestamps.created,
            timestamps.expires,
            len(message.raw),
        )
        return message

    def _ssl_context(self) -> ssl.SSLContext:
        return create_ssl_context(self.settings)

    def send(self, request: TokenRequest) -> SoapResponse:
        """
        Build ``request``, send it to the STS, and return the raw response.

        The message is built before the connection is opened; the connection
        is closed on every exit path.

        Raises:
            MessageBuildError: If the request cannot be built.
            ConnectionInitError: If the trust store or connection cannot be
                set up.
            TransportError: If the exchange fails.
        """
        message = self.build_request(request)
        ssl_context = self._ssl_context()

        _logger.info("Sending %s request to %s", request.action.value, self.settings.endpoint_url)
        with open_connection(
            self.settings.endpoint_url, ssl_context, self.settings.timeout
        ) as connection:
            response = connection.call(message)

        _logger.info(
            "%s response: HTTP %d, %d bytes",
            request.action.value,
            response.status,
            len(response.raw),
        )
        return response

    def invoke(self, action: str | Action, *parameters: str) -> SoapResponse:
        """
        Run an action given by name with positional string parameters.

        Issue takes no parameters (extras are ignored); Renew and Validate
        use the first parameter as the security token identifier.

        Raises:
            InvalidActionError: Before any network activity, if the action is
                unknown or a required token identifier is missing.
            WSTrustError: Any failure of :meth:`send`.
        """
        return self.send(parse_request(action, *parameters))

    def __repr__(self) -> str:
        return f"WSTrustClient(endpoint={self.settings.endpoint_url!r})"
