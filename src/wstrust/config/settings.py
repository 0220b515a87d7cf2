"""
Client settings for wstrust.

:class:`ClientSettings` is the explicit configuration object handed to
:class:`~wstrust.client.WSTrustClient`.  :func:`resolve_settings` fills it
from arguments, environment variables, and ~/.wstrust/config.json.
"""

from __future__ import annotations

__all__ = [
    "ClientSettings",
    "reset_all",
    "resolve_settings",
    "save_settings",
    "validate_endpoint_url",
]

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from ..constants import (
    DEFAULT_ENDPOINT_URL,
    DEFAULT_TIMEOUT,
    ENV_PASS,
    ENV_TIMEOUT,
    ENV_TRUSTSTORE,
    ENV_TRUSTSTORE_PASSWORD,
    ENV_URL,
    ENV_USER,
    MAX_TIMEOUT,
    MIN_TIMEOUT,
)
from ..errors import ConfigError
from ._storage import erase_document, load_stored_settings, update_document
from .secrets import TRUSTSTORE_ACCOUNT, clear_secrets, get_secret, save_secret, user_account

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSettings:
    """Everything a client needs to reach the STS.

    Attributes:
        endpoint_url: STS endpoint (https).
        trust_store_path: Trust store file; None means the system store.
        trust_store_password: Password of a PKCS#12 trust store.
        timeout: Socket timeout in seconds.
        username: Optional UsernameToken user.
        password: Optional UsernameToken password.
    """

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    trust_store_path: str | None = None
    trust_store_password: str | None = field(default=None, repr=False)
    timeout: int = DEFAULT_TIMEOUT
    username: str | None = None
    password: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not MIN_TIMEOUT <= self.timeout <= MAX_TIMEOUT:
            raise ConfigError(
                f"Timeout {self.timeout} out of range [{MIN_TIMEOUT}, {MAX_TIMEOUT}]"
            )


def validate_endpoint_url(url: str) -> str:
    """
    Check that ``url`` is an https URL with a hostname.

    Returns:
        The stripped URL.

    Raises:
        ConfigError: If the scheme or hostname is invalid.
    """
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme != "https":
        raise ConfigError(f"Invalid URL scheme {parsed.scheme!r} in {url!r}. Use https://.")
    if not parsed.hostname:
        raise ConfigError(f"Invalid URL: no hostname found in {url!r}")
    return url


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _resolve_timeout(explicit: int | None, config_timeout: int | None) -> int:
    if explicit is not None:
        return explicit
    timeout_str = _env(ENV_TIMEOUT)
    if timeout_str:
        try:
            timeout = int(timeout_str)
        except ValueError:
            _logger.warning("Invalid %s value %r, using default", ENV_TIMEOUT, timeout_str)
        else:
            if MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
                return timeout
            _logger.warning(
                "%s=%d out of range [%d, %d], using default",
                ENV_TIMEOUT,
                timeout,
                MIN_TIMEOUT,
                MAX_TIMEOUT,
            )
        return DEFAULT_TIMEOUT
    if config_timeout is not None:
        return config_timeout
    return DEFAULT_TIMEOUT


def resolve_settings(
    url: str | None = None,
    timeout: int | None = None,
    trust_store: str | None = None,
    trust_store_password: str | None = None,
    username: str | None = None,
    password: str | None = None,
) -> ClientSettings:
    """
    Resolve client settings.

    Priority: explicit arguments > env vars > config file / keyring > defaults.

    Raises:
        ConfigError: If the resolved timeout is out of range.
    """
    config = load_stored_settings()

    resolved_url = url or _env(ENV_URL) or config.get("url") or DEFAULT_ENDPOINT_URL
    resolved_store = trust_store or _env(ENV_TRUSTSTORE) or config.get("truststore") or None

    resolved_store_pass = trust_store_password or _env(ENV_TRUSTSTORE_PASSWORD) or None
    if resolved_store_pass is None and resolved_store:
        resolved_store_pass = get_secret(TRUSTSTORE_ACCOUNT)

    resolved_user = username or _env(ENV_USER) or config.get("username") or None
    resolved_pass = password or _env(ENV_PASS) or None
    if resolved_pass is None and resolved_user:
        resolved_pass = get_secret(user_account(resolved_user))

    settings = ClientSettings(
        endpoint_url=resolved_url,
        trust_store_path=resolved_store,
        trust_store_password=resolved_store_pass,
        timeout=_resolve_timeout(timeout, config.get("timeout")),
        username=resolved_user,
        password=resolved_pass,
    )
    _logger.debug(
        "Resolved settings: url=%s, truststore=%s, has_store_password=%s, user=%s, timeout=%ds",
        settings.endpoint_url,
        settings.trust_store_path,
        bool(settings.trust_store_password),
        bool(settings.username),
        settings.timeout,
    )
    return settings


def save_settings(
    url: str | None = None,
    timeout: int | None = None,
    trust_store: str | None = None,
    trust_store_password: str | None = None,
    username: str | None = None,
    password: str | None = None,
) -> None:
    """
    Persist settings; arguments left as None keep their saved value.

    Passwords go to the keyring when available (see :mod:`.secrets`).

    Raises:
        ConfigError: If the URL or timeout is invalid.
    """
    changes: dict[str, object | None] = {}
    if url is not None:
        changes["url"] = validate_endpoint_url(url)
    if timeout is not None:
        if not MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
            raise ConfigError(f"Timeout {timeout} out of range [{MIN_TIMEOUT}, {MAX_TIMEOUT}]")
        changes["timeout"] = timeout
    if trust_store is not None:
        changes["truststore"] = trust_store
    if username is not None:
        changes["username"] = username
    if changes:
        update_document(changes)

    if trust_store_password is not None:
        save_secret(TRUSTSTORE_ACCOUNT, trust_store_password)
    if password is not None:
        saved_user = username or load_stored_settings().get("username")
        if not saved_user:
            raise ConfigError("Cannot save a password without a username.")
        save_secret(user_account(saved_user), password)


def reset_all() -> None:
    """Clear all configuration, including saved secrets."""
    clear_secrets()
    erase_document()
