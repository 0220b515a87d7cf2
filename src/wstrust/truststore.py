# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Trust store loading for STS connections.

The trust store holds the certificates used to verify the STS's TLS
identity.  Two formats are accepted:

- PKCS#12 (``.p12`` / ``.pfx``), decrypted with the trust store password
  via ``cryptography``.
- PEM or DER certificate bundles, parsed with ``asn1crypto``.  The
  password is not needed for these.

Every certificate found becomes a trust anchor of a fresh
``ssl.SSLContext``; nothing is written to process-wide state.
"""

from __future__ import annotations

__all__ = ["TrustAnchor", "TrustStore", "create_ssl_context", "load_trust_store"]

import datetime
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from asn1crypto import pem as asn1_pem
from asn1crypto import x509 as asn1_x509
from cryptography.hazmat.primitives.serialization import Encoding, pkcs12

from .errors import TrustStoreError

if TYPE_CHECKING:
    from .config.settings import ClientSettings

_logger = logging.getLogger(__name__)

_PKCS12_SUFFIXES = (".p12", ".pfx")


@dataclass(frozen=True)
class TrustAnchor:
    """One certificate of the trust store."""

    subject: str
    not_before: datetime.datetime | None
    not_after: datetime.datetime | None
    der: bytes

    def is_valid_at(self, moment: datetime.datetime) -> bool:
        if self.not_before and moment < self.not_before:
            return False
        return not (self.not_after and moment > self.not_after)


@dataclass(frozen=True)
class TrustStore:
    """Certificates loaded from a trust store file."""

    path: Path
    anchors: tuple[TrustAnchor, ...]

    def cadata(self) -> bytes:
        """Concatenated DER certificates, as accepted by ``load_verify_locations``."""
        return b"".join(anchor.der for anchor in self.anchors)

    def describe(self) -> list[str]:
        """Human-readable lines listing each anchor and its validity window."""
        lines = [f"{self.path} ({len(self.anchors)} certificate(s))"]
        now = datetime.datetime.now(datetime.timezone.utc)
        for anchor in self.anchors:
            state = "valid" if anchor.is_valid_at(now) else "NOT VALID NOW"
            lines.append(f"  {anchor.subject}")
            lines.append(f"    {anchor.not_before} .. {anchor.not_after} [{state}]")
        return lines


def _anchor_from_der(der: bytes) -> TrustAnchor:
    """Parse one DER certificate and warn if it is outside its validity window."""
    cert = asn1_x509.Certificate.load(der, strict=True)
    subject = cert.subject.human_friendly
    not_before = cert.not_valid_before
    not_after = cert.not_valid_after
    anchor = TrustAnchor(subject=subject, not_before=not_before, not_after=not_after, der=der)

    now = datetime.datetime.now(datetime.timezone.utc)
    if not_before and now < not_before:
        _logger.warning("Trust anchor %s is not yet valid (notBefore: %s)", subject, not_before)
    elif not_after and now > not_after:
        _logger.warning("Trust anchor %s has expired (notAfter: %s)", subject, not_after)
    return anchor


def _load_certificate_bundle(data: bytes) -> list[bytes]:
    """Split a PEM bundle (or a single DER certificate) into DER blobs."""
    if asn1_pem.detect(data):
        return [
            der
            for type_name, _headers, der in asn1_pem.unarmor(data, multiple=True)
            if type_name in ("CERTIFICATE", "TRUSTED CERTIFICATE")
        ]
    return [data]


def _load_pkcs12(data: bytes, password: str | None) -> list[bytes]:
    """Decrypt a PKCS#12 trust store and return its certificates as DER."""
    secret = password.encode("utf-8") if password else None
    bundle = pkcs12.load_pkcs12(data, secret)
    certs = [c.certificate for c in bundle.additional_certs]
    if bundle.cert is not None:
        certs.insert(0, bundle.cert.certificate)
    return [cert.public_bytes(Encoding.DER) for cert in certs]


def load_trust_store(path: str | Path, password: str | None = None) -> TrustStore:
    """
    Load every certificate from a trust store file.

    Args:
        path: Trust store file (PKCS#12, PEM bundle or DER certificate).
        password: Trust store password (PKCS#12 only).

    Returns:
        TrustStore with at least one anchor.

    Raises:
        TrustStoreError: If the file cannot be read, decrypted or parsed,
            or holds no certificates.
    """
    store_path = Path(path).expanduser()
    try:
        data = store_path.read_bytes()
    except OSError as e:
        raise TrustStoreError(f"Cannot read trust store {store_path}: {e}") from e

    is_pkcs12 = store_path.suffix.lower() in _PKCS12_SUFFIXES
    try:
        ders = _load_pkcs12(data, password) if is_pkcs12 else _load_certificate_bundle(data)
        anchors = tuple(_anchor_from_der(der) for der in ders)
    except (ValueError, TypeError, KeyError) as e:
        kind = "PKCS#12" if is_pkcs12 else "certificate bundle"
        raise TrustStoreError(f"Invalid {kind} trust store {store_path}: {e}") from e

    if not anchors:
        raise TrustStoreError(f"Trust store {store_path} contains no certificates")

    _logger.debug("Loaded trust store %s: %d certificate(s)", store_path, len(anchors))
    return TrustStore(path=store_path, anchors=anchors)


def create_ssl_context(settings: ClientSettings) -> ssl.SSLContext:
    """
    Build the TLS context for an STS connection.

    Uses the configured trust store as the only set of trust anchors, or
    the system default store when none is configured.

    Raises:
        TrustStoreError: If the trust store cannot be loaded.
    """
    if not settings.trust_store_path:
        _logger.debug("No trust store configured, using system default")
        return ssl.create_default_context()

    store = load_trust_store(settings.trust_store_path, settings.trust_store_password)
    try:
        context = ssl.create_default_context(cadata=store.cadata())
    except ssl.SSLError as e:
        raise TrustStoreError(f"Trust store {store.path} rejected by TLS: {e}") from e
    _logger.debug("TLS context built from %s", store.path)
    return context
