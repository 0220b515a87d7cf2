"""
On-disk store for ~/.wstrust/config.json.

The file holds the connection settings written by ``wstrust setup`` and,
when no keyring backend exists, the plaintext secret fallbacks owned by
:mod:`.secrets`.  Only the settings keys are interpreted here; every other
key is carried through reads and writes untouched.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "StoredSettings",
    "erase_document",
    "load_stored_settings",
    "read_document",
    "update_document",
    "write_document",
]

import json
import logging
import os
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypedDict, cast

from ..constants import MAX_TIMEOUT, MIN_TIMEOUT

_logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".wstrust"
CONFIG_FILE = CONFIG_DIR / "config.json"


class StoredSettings(TypedDict, total=False):
    """Settings keys of config.json, after checking."""

    url: str
    timeout: int
    truststore: str
    username: str


def _check_url(value: object) -> str | None:
    if isinstance(value, str) and value.strip().lower().startswith("https://"):
        return value.strip()
    return None


def _check_timeout(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if MIN_TIMEOUT <= value <= MAX_TIMEOUT else None


def _check_truststore(value: object) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    path = Path(value.strip()).expanduser()
    if not path.is_file():
        # still returned; load_trust_store reports the real error
        _logger.warning("Configured trust store %s does not exist", path)
    return str(path)


def _check_username(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


_SETTINGS_CHECKS: dict[str, Callable[[object], object | None]] = {
    "url": _check_url,
    "timeout": _check_timeout,
    "truststore": _check_truststore,
    "username": _check_username,
}


def read_document() -> dict[str, object]:
    """Return the whole JSON object stored on disk, or ``{}``.

    A missing file is silent; an unreadable or malformed one is logged
    and treated as empty.
    """
    try:
        with CONFIG_FILE.open(encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        _logger.warning("Ignoring unreadable config file %s: %s", CONFIG_FILE, e)
        return {}
    if not isinstance(document, dict):
        _logger.warning("Ignoring config file %s: top level is not an object", CONFIG_FILE)
        return {}
    return cast("dict[str, object]", document)


def load_stored_settings() -> StoredSettings:
    """Return the settings keys of config.json that pass their checks."""
    document = read_document()
    stored: dict[str, object] = {}
    for key, check in _SETTINGS_CHECKS.items():
        if key not in document:
            continue
        value = check(document[key])
        if value is None:
            _logger.warning("Ignoring invalid %r in %s", key, CONFIG_FILE)
        else:
            stored[key] = value
    return cast("StoredSettings", stored)


def write_document(document: Mapping[str, object]) -> None:
    """Replace config.json atomically.

    The staging file is chmod 600 before anything is written to it, then
    renamed over the old file, so readers see either the old or the new
    document and never a partial one.
    """
    CONFIG_DIR.mkdir(mode=0o700, parents=True, exist_ok=True)
    payload = json.dumps(dict(document), indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    staging: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=CONFIG_DIR,
            prefix="config-",
            suffix=".tmp",
            delete=False,
        ) as handle:
            staging = Path(handle.name)
            if os.name != "nt":
                os.fchmod(handle.fileno(), 0o600)
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staging, CONFIG_FILE)
    except BaseException:
        if staging is not None:
            staging.unlink(missing_ok=True)
        raise
    _logger.debug("Wrote %s (%d keys)", CONFIG_FILE, len(document))


def update_document(changes: Mapping[str, object | None]) -> dict[str, object]:
    """Merge ``changes`` into config.json; a None value removes the key.

    Returns:
        The document as written.
    """
    document = read_document()
    for key, value in changes.items():
        if value is None:
            document.pop(key, None)
        else:
            document[key] = value
    write_document(document)
    return document


def erase_document() -> None:
    """Delete config.json if it exists."""
    CONFIG_FILE.unlink(missing_ok=True)
    _logger.debug("Removed %s", CONFIG_FILE)
