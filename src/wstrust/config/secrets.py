"""
Secret storage for wstrust.

Two secrets are kept: the trust store password and the password of the
optional WS-Security UsernameToken.  They are stored in the system
keychain (keyring) when a backend is available, falling back to the
config file otherwise.
"""

from __future__ import annotations

__all__ = [
    "TRUSTSTORE_ACCOUNT",
    "clear_secrets",
    "get_secret",
    "get_storage_info",
    "is_keyring_available",
    "save_secret",
    "user_account",
]

import logging

import keyring
from keyring.backends import fail as _keyring_fail
from keyring.errors import KeyringError

from ._storage import CONFIG_FILE, read_document, write_document

_logger = logging.getLogger(__name__)

# Keyring service name for secret storage
_KEYRING_SERVICE = "wstrust"

TRUSTSTORE_ACCOUNT = "truststore"

# Plaintext layout in config.json when no keyring backend is available:
#   "truststore_password": "<secret>"
#   "user_passwords": {"<username>": "<secret>"}
_TRUSTSTORE_KEY = "truststore_password"
_USER_PASSWORDS_KEY = "user_passwords"
_USER_PREFIX = "user:"


def user_account(username: str) -> str:
    """Keyring account name of a UsernameToken user."""
    return f"{_USER_PREFIX}{username}"


def _user_passwords(document: dict[str, object]) -> dict[str, str]:
    passwords = document.get(_USER_PASSWORDS_KEY)
    if not isinstance(passwords, dict):
        return {}
    return {k: v for k, v in passwords.items() if isinstance(k, str) and isinstance(v, str)}


def _read_fallback(document: dict[str, object], account: str) -> str | None:
    if account == TRUSTSTORE_ACCOUNT:
        value = document.get(_TRUSTSTORE_KEY)
    else:
        value = _user_passwords(document).get(account.removeprefix(_USER_PREFIX))
    return value if isinstance(value, str) and value else None


def _store_fallback(document: dict[str, object], account: str, secret: str | None) -> bool:
    """Set (or, with None, remove) the plaintext copy of a secret in ``document``.

    Returns:
        True if ``document`` changed.
    """
    if account == TRUSTSTORE_ACCOUNT:
        if secret is None:
            return document.pop(_TRUSTSTORE_KEY, None) is not None
        document[_TRUSTSTORE_KEY] = secret
        return True

    passwords = _user_passwords(document)
    username = account.removeprefix(_USER_PREFIX)
    if secret is None:
        if passwords.pop(username, None) is None:
            return False
    else:
        passwords[username] = secret
    if passwords:
        document[_USER_PASSWORDS_KEY] = passwords
    else:
        document.pop(_USER_PASSWORDS_KEY, None)
    return True


def is_keyring_available() -> bool:
    """Check if a usable keyring backend is installed."""
    try:
        backend = keyring.get_keyring()
    except (KeyringError, RuntimeError) as e:
        _logger.debug("Keyring backend lookup failed: %s", e)
        return False
    return not isinstance(backend, _keyring_fail.Keyring)


def get_storage_info() -> str:
    """Return a human-readable description of where secrets are stored."""
    if is_keyring_available():
        backend = keyring.get_keyring()
        return f"System keychain ({type(backend).__name__})"
    return f"{CONFIG_FILE} (plaintext)"


def get_secret(account: str) -> str | None:
    """
    Look up a saved secret.

    Keyring is tried first; the config file is the fallback.

    Returns:
        The secret, or None if it is not saved anywhere.
    """
    if is_keyring_available():
        try:
            secret = keyring.get_password(_KEYRING_SERVICE, account)
        except KeyringError as e:
            _logger.debug("Keyring read failed, trying config file: %s", e)
        except (OSError, RuntimeError) as e:
            _logger.debug("Keyring backend error, trying config file: %s", e)
        else:
            if secret:
                return secret

    value = _read_fallback(read_document(), account)
    if value is not None:
        _logger.debug("Secret %s found in config file (plaintext)", account)
        return value
    return None


def save_secret(account: str, secret: str) -> bool:
    """
    Save a secret.

    Returns:
        True if it was stored in the system keychain, False if it fell
        back to the config file (chmod 600).
    """
    document = read_document()

    if is_keyring_available():
        try:
            keyring.set_password(_KEYRING_SERVICE, account, secret)
        except KeyringError as e:
            _logger.warning("Keyring save failed, using config file: %s", e)
        except (OSError, RuntimeError) as e:
            _logger.warning("Keyring backend error, using config file: %s", e)
        else:
            if _store_fallback(document, account, None):
                write_document(document)
            return True
    else:
        _logger.warning(
            "Keyring unavailable. Secret will be saved in plaintext (%s).",
            CONFIG_FILE,
        )

    _store_fallback(document, account, secret)
    write_document(document)
    return False


def _keyring_delete(account: str) -> None:
    if not is_keyring_available():
        return
    try:
        keyring.delete_password(_KEYRING_SERVICE, account)
        _logger.debug("Deleted keyring entry %s", account)
    except KeyringError:
        pass  # entry doesn't exist
    except (OSError, RuntimeError) as e:
        _logger.debug("Keyring delete failed: %s", e)


def clear_secrets() -> None:
    """Remove all saved secrets from keyring and config file."""
    document = read_document()
    usernames = set(_user_passwords(document))
    saved_user = document.get("username")
    if isinstance(saved_user, str) and saved_user:
        usernames.add(saved_user)

    _keyring_delete(TRUSTSTORE_ACCOUNT)
    for username in sorted(usernames):
        _keyring_delete(user_account(username))

    had_plaintext = _TRUSTSTORE_KEY in document or _USER_PASSWORDS_KEY in document
    document.pop(_TRUSTSTORE_KEY, None)
    document.pop(_USER_PASSWORDS_KEY, None)
    if had_plaintext:
        write_document(document)
    _logger.info("Cleared saved secrets")
