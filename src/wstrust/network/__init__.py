"""Network transport and SOAP protocol layer."""

from __future__ import annotations

from .connection import SoapConnection, open_connection
from .message import SoapMessage, SoapResponse

__all__ = ["SoapConnection", "SoapMessage", "SoapResponse", "open_connection"]
