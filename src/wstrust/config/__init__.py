"""
Configuration management.

Unified API for all config-related functionality. Instead of importing
from individual submodules (settings, secrets), import from this package
directly.
"""

from __future__ import annotations

from ._storage import CONFIG_FILE
from .secrets import (
    clear_secrets,
    get_secret,
    get_storage_info,
    is_keyring_available,
    save_secret,
)
from .settings import (
    ClientSettings,
    reset_all,
    resolve_settings,
    save_settings,
    validate_endpoint_url,
)

__all__ = [
    "CONFIG_FILE",
    "ClientSettings",
    "clear_secrets",
    "get_secret",
    "get_storage_info",
    "is_keyring_available",
    "reset_all",
    "resolve_settings",
    "save_secret",
    "save_settings",
    "validate_endpoint_url",
]
