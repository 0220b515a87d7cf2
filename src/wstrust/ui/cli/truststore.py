"""Trust store inspection subcommand."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...config import resolve_settings
from ...errors import TrustStoreError
from ...truststore import load_trust_store
from ..helpers import fail

if TYPE_CHECKING:
    import argparse


def cmd_truststore(args: argparse.Namespace) -> None:
    """List the certificates of the given (or configured) trust store."""
    settings = resolve_settings(trust_store=args.path)
    if not settings.trust_store_path:
        print("No trust store configured; the system default trust store is used.")
        return

    try:
        store = load_trust_store(settings.trust_store_path, settings.trust_store_password)
    except TrustStoreError as e:
        fail(str(e))
        return

    for line in store.describe():
        print(line)
