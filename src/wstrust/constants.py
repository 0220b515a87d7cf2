"""
Application-wide constants for wstrust.

Timeouts, size limits, XML namespaces, and environment variable names are
centralized here for easy maintenance and configuration.
"""

from __future__ import annotations

import datetime
import importlib.metadata

try:
    __version__ = importlib.metadata.version("wstrust-client")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "BYTES_PER_MB",
    "DEFAULT_ENDPOINT_URL",
    "DEFAULT_TIMEOUT",
    "ENV_PASS",
    "ENV_TIMEOUT",
    "ENV_TRUSTSTORE",
    "ENV_TRUSTSTORE_PASSWORD",
    "ENV_URL",
    "ENV_USER",
    "MAX_RESPONSE_SIZE",
    "MAX_TIMEOUT",
    "MIN_TIMEOUT",
    "NS_SOAP12",
    "NS_WSA",
    "NS_WSSE",
    "NS_WST",
    "NS_WSU",
    "RECV_BUFFER_SIZE",
    "SOAP12_CONTENT_TYPE",
    "TIMESTAMP_FORMAT",
    "TOKEN_LIFETIME",
    "TOKEN_TYPE_SAML2",
    "TOKEN_TYPE_STATUS",
    "XML_PREVIEW_LENGTH",
    "__version__",
]

# ── Timeout values (seconds) ──────────────────────────────────────────

# STS request timeout
DEFAULT_TIMEOUT = 120

MIN_TIMEOUT = 1
MAX_TIMEOUT = 3600


# ── Size limits (bytes) ───────────────────────────────────────────────

BYTES_PER_MB = 1024 * 1024

# Maximum STS response body size (10 MB)
MAX_RESPONSE_SIZE = 10 * 1024 * 1024

RECV_BUFFER_SIZE = 8192

# XML preview truncation length for error messages (characters)
XML_PREVIEW_LENGTH = 300


# ── Security token timing ─────────────────────────────────────────────

# Validity window of a request: created = now, expires = now + TOKEN_LIFETIME
TOKEN_LIFETIME = datetime.timedelta(minutes=5)

# strftime part of yyyy-MM-ddTHH:mm:ss.SSSZ; milliseconds and "Z" appended separately
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


# ── Protocol constants ────────────────────────────────────────────────

NS_SOAP12 = "http://www.w3.org/2003/05/soap-envelope"
NS_WSA = "http://www.w3.org/2005/08/addressing"
NS_WST = "http://docs.oasis-open.org/ws-sx/ws-trust/200512"
NS_WSSE = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
NS_WSU = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"

TOKEN_TYPE_SAML2 = "http://docs.oasis-open.org/wss/oasis-wss-saml-token-profile-1.1#SAMLV2.0"
TOKEN_TYPE_STATUS = f"{NS_WST}/RSTR/Status"

SOAP12_CONTENT_TYPE = "application/soap+xml"

# Default STS endpoint (WSO2 Identity Server on localhost)
DEFAULT_ENDPOINT_URL = "https://localhost:9443/services/wso2carbon-sts"


# ── Environment variable names ──────────────────────────────────────

ENV_URL = "WSTRUST_URL"
ENV_TIMEOUT = "WSTRUST_TIMEOUT"
ENV_TRUSTSTORE = "WSTRUST_TRUSTSTORE"
ENV_TRUSTSTORE_PASSWORD = "WSTRUST_TRUSTSTORE_PASSWORD"
ENV_USER = "WSTRUST_USER"
ENV_PASS = "WSTRUST_PASS"
