"""SOAP 1.2 message objects for requests and responses."""

from __future__ import annotations

__all__ = ["SoapMessage", "SoapResponse"]

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from xml.etree.ElementTree import ParseError as _XMLParseError
from xml.etree.ElementTree import tostring as _tostring

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from ..constants import NS_SOAP12, NS_WSA, SOAP12_CONTENT_TYPE, XML_PREVIEW_LENGTH
from ..errors import MessageBuildError

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

_logger = logging.getLogger(__name__)

_ENVELOPE_TAG = f"{{{NS_SOAP12}}}Envelope"
_HEADER_TAG = f"{{{NS_SOAP12}}}Header"
_BODY_TAG = f"{{{NS_SOAP12}}}Body"
_WSA_ACTION_TAG = f"{{{NS_WSA}}}Action"

# Regex patterns for redacting credentials from XML previews in error messages
_REDACT_PASSWORD_PATTERN = r"<([\w:]*)Password([^>]*)>[^<]*</[\w:]*Password>"
_REDACT_PASSWORD_REPLACEMENT = r"<\1Password\2>[REDACTED]</\1Password>"


def _redact_and_truncate_xml(xml_str: str) -> str:
    """Redact passwords from XML and truncate to preview length."""
    redacted = re.sub(_REDACT_PASSWORD_PATTERN, _REDACT_PASSWORD_REPLACEMENT, xml_str)
    return redacted[:XML_PREVIEW_LENGTH]


class SoapMessage:
    """A parsed SOAP 1.2 envelope together with its exact wire bytes.

    Use :meth:`from_bytes` or :meth:`from_string` to construct one; both
    reject documents that are not SOAP 1.2 envelopes with a body.
    """

    def __init__(self, raw: bytes, envelope: Element) -> None:
        self.raw = raw
        self.envelope = envelope

    @classmethod
    def from_bytes(cls, data: bytes) -> SoapMessage:
        """
        Parse raw XML bytes into a SOAP message.

        Raises:
            MessageBuildError: If the bytes are not well-formed XML or not a
                SOAP 1.2 envelope with a Body element.
        """
        try:
            root = ET.fromstring(data)
        except (_XMLParseError, DefusedXmlException) as e:
            preview = _redact_and_truncate_xml(data[:500].decode("utf-8", errors="replace"))
            raise MessageBuildError(f"Invalid SOAP XML: {e}\nRaw: {preview}") from e

        if root.tag != _ENVELOPE_TAG:
            raise MessageBuildError(f"Not a SOAP 1.2 envelope: root element is {root.tag}")
        if root.find(_BODY_TAG) is None:
            raise MessageBuildError("SOAP envelope has no Body element")

        _logger.debug("Parsed SOAP message: %d bytes", len(data))
        return cls(data, root)

    @classmethod
    def from_string(cls, xml_str: str) -> SoapMessage:
        return cls.from_bytes(xml_str.encode("utf-8"))

    @property
    def header(self) -> Element | None:
        return self.envelope.find(_HEADER_TAG)

    @property
    def body(self) -> Element:
        body = self.envelope.find(_BODY_TAG)
        if body is None:  # checked on construction
            raise MessageBuildError("SOAP envelope has no Body element")
        return body

    @property
    def soap_action(self) -> str | None:
        """The ``wsa:Action`` header value, if present."""
        header = self.header
        if header is None:
            return None
        elem = header.find(_WSA_ACTION_TAG)
        if elem is None or not elem.text:
            return None
        return elem.text.strip()

    def body_xml(self) -> bytes:
        """Serialize the Body element (used to compare payloads)."""
        body = copy.copy(self.body)
        body.tail = None
        return _tostring(body, encoding="utf-8")

    def text(self) -> str:
        return self.raw.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"SoapMessage(action={self.soap_action!r}, size={len(self.raw)})"


@dataclass
class SoapResponse:
    """Raw response from the STS.

    The body is returned as received.  SOAP faults are not interpreted; a
    fault delivered with HTTP 500 is still a ``SoapResponse``.
    """

    status: int
    content_type: str
    raw: bytes
    _message: SoapMessage | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def is_soap(self) -> bool:
        """Whether the server labelled the body as a SOAP 1.2 message."""
        return self.content_type.split(";", 1)[0].strip().lower() == SOAP12_CONTENT_TYPE

    @property
    def message(self) -> SoapMessage:
        """Parse the body as a SOAP message (on first access).

        Raises:
            MessageBuildError: If the body is not a SOAP 1.2 envelope.
        """
        if self._message is None:
            self._message = SoapMessage.from_bytes(self.raw)
        return self._message

    def text(self) -> str:
        return self.raw.decode("utf-8", errors="replace")
