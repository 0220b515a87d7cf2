"""
SOAP-over-HTTPS connection to a Security Token Service.

One :class:`SoapConnection` carries one request/response exchange.  It is
a context manager so the socket is released on every exit path:

    with open_connection(url, ssl_context, timeout) as conn:
        response = conn.call(message)
"""

from __future__ import annotations

__all__ = ["SoapConnection", "open_connection"]

import http.client
import logging
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlparse

from ..constants import (
    BYTES_PER_MB,
    DEFAULT_TIMEOUT,
    MAX_RESPONSE_SIZE,
    RECV_BUFFER_SIZE,
    SOAP12_CONTENT_TYPE,
)
from ..errors import ConnectionInitError, TransportError
from .message import SoapResponse

if TYPE_CHECKING:
    import ssl
    import types

    from .message import SoapMessage

_logger = logging.getLogger(__name__)

# SOAP 1.2 faults are delivered with this status (SOAP 1.2 HTTP binding)
_HTTP_SOAP_FAULT = 500


class _Readable(Protocol):
    def read(self, amt: int = ...) -> bytes: ...


def _read_with_limit(response: _Readable, url: str) -> bytes:
    """Read an HTTP response body with size limit to prevent memory exhaustion."""
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = response.read(RECV_BUFFER_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > MAX_RESPONSE_SIZE:
            raise TransportError(
                f"Response from {url} exceeds {MAX_RESPONSE_SIZE // BYTES_PER_MB} MB limit"
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _is_soap_content_type(content_type: str) -> bool:
    return content_type.split(";", 1)[0].strip().lower() == SOAP12_CONTENT_TYPE


class SoapConnection:
    """A single HTTPS connection to an STS endpoint.

    Args:
        url: STS endpoint URL (https only).
        ssl_context: TLS context holding the trust anchors.
        timeout: Socket timeout in seconds.

    Raises:
        ConnectionInitError: If the URL is not an https URL with a hostname.
    """

    def __init__(
        self, url: str, ssl_context: ssl.SSLContext, timeout: int = DEFAULT_TIMEOUT
    ) -> None:
        parsed = urlparse(url)
        if parsed.scheme.lower() != "https":
            raise ConnectionInitError(
                f"Only HTTPS endpoints are allowed (got {parsed.scheme or 'no scheme'}://): {url}"
            )
        if not parsed.hostname:
            raise ConnectionInitError(f"Cannot extract hostname from URL: {url}")

        self.url = url
        self.timeout = timeout
        self._path = parsed.path or "/"
        if parsed.query:
            self._path = f"{self._path}?{parsed.query}"
        try:
            self._conn = http.client.HTTPSConnection(
                parsed.hostname, parsed.port, timeout=timeout, context=ssl_context
            )
        except ValueError as e:  # invalid port
            raise ConnectionInitError(f"Invalid endpoint URL {url}: {e}") from e
        self._closed = False

    def connect(self) -> None:
        """Open the TCP connection and complete the TLS handshake.

        Raises:
            ConnectionInitError: On DNS, socket, timeout, or TLS failures.
        """
        _logger.debug("Connecting to %s (timeout=%ds)", self.url, self.timeout)
        try:
            self._conn.connect()
        except TimeoutError as e:
            raise ConnectionInitError(
                f"Connection timed out after {self.timeout}s: {self.url}"
            ) from e
        except OSError as e:
            raise ConnectionInitError(f"Cannot connect to {self.url}: {e}") from e

    def call(self, message: SoapMessage) -> SoapResponse:
        """
        Send a SOAP message and return the response.

        A 2xx answer, or a 500 answer labelled as SOAP (a SOAP fault), is
        returned as-is.

        Raises:
            TransportError: On network failures, oversized responses, or a
                non-SOAP error status.
        """
        if self._closed:
            raise TransportError(f"Connection to {self.url} is closed")

        content_type = f"{SOAP12_CONTENT_TYPE}; charset=utf-8"
        action = message.soap_action
        if action:
            content_type += f'; action="{action}"'
        headers = {"Content-Type": content_type, "Accept": SOAP12_CONTENT_TYPE}

        _logger.debug("POST %s (%d bytes, action=%s)", self.url, len(message.raw), action)
        try:
            self._conn.request("POST", self._path, body=message.raw, headers=headers)
            response = self._conn.getresponse()
            status = response.status
            response_type = response.getheader("Content-Type", "")
            data = _read_with_limit(response, self.url)
        except TimeoutError as e:
            raise TransportError(f"Request timed out after {self.timeout}s: {self.url}") from e
        except (http.client.HTTPException, OSError) as e:
            raise TransportError(f"SOAP call to {self.url} failed: {e}") from e

        _logger.debug("POST %s -> HTTP %d, %d bytes", self.url, status, len(data))

        if 200 <= status < 300:
            return SoapResponse(status=status, content_type=response_type, raw=data)
        if status == _HTTP_SOAP_FAULT and _is_soap_content_type(response_type):
            _logger.info("STS returned a SOAP fault (HTTP %d)", status)
            return SoapResponse(status=status, content_type=response_type, raw=data)
        raise TransportError(f"HTTP {status} from {self.url}", status=status)

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._conn.close()
        _logger.debug("Closed connection to %s", self.url)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> SoapConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.close()


def open_connection(
    url: str, ssl_context: ssl.SSLContext, timeout: int = DEFAULT_TIMEOUT
) -> SoapConnection:
    """
    Create and connect a :class:`SoapConnection`.

    Raises:
        ConnectionInitError: If the URL is invalid or the connection
            cannot be opened.
    """
    conn = SoapConnection(url, ssl_context, timeout)
    try:
        conn.connect()
    except BaseException:
        conn.close()
        raise
    return conn
