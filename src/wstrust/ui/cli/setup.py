"""
Setup for the wstrust CLI.

Saves the STS endpoint, trust store and optional UsernameToken
credentials.  Values not given on the command line are prompted for.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...config import (
    CONFIG_FILE,
    get_storage_info,
    resolve_settings,
    save_settings,
    validate_endpoint_url,
)
from ...errors import ConfigError, TrustStoreError
from ...truststore import load_trust_store
from ..helpers import confirm_choice, fail, safe_getpass, safe_input

if TYPE_CHECKING:
    import argparse


def _prompt_url(current: str) -> str:
    answer = safe_input(f"STS endpoint URL [{current}]: ")
    if answer is None:
        raise SystemExit(1)
    return answer or current


def _prompt_truststore(current: str | None) -> tuple[str | None, str | None]:
    """Ask for the trust store path and, for PKCS#12 stores, its password."""
    hint = current or "system default"
    answer = safe_input(f"Trust store file (PEM, DER or PKCS#12) [{hint}]: ")
    if answer is None:
        raise SystemExit(1)
    path = answer or current
    if not path:
        return None, None
    password = None
    if path.lower().endswith((".p12", ".pfx")):
        password = safe_getpass("Trust store password: ")
        if password is None:
            raise SystemExit(1)
    return path, password


def cmd_setup(args: argparse.Namespace) -> None:
    """Save STS connection settings."""
    current = resolve_settings()
    interactive = not args.non_interactive

    url = args.url
    if url is None and interactive:
        url = _prompt_url(current.endpoint_url)

    truststore = args.truststore
    store_password = None
    if truststore is None and interactive:
        truststore, store_password = _prompt_truststore(current.trust_store_path)
    elif truststore and truststore.lower().endswith((".p12", ".pfx")) and interactive:
        store_password = safe_getpass("Trust store password: ")

    if truststore:
        try:
            store = load_trust_store(truststore, store_password)
        except TrustStoreError as e:
            fail(str(e))
            return
        print(f"Trust store OK: {len(store.anchors)} certificate(s)")

    username = args.username
    password = None
    if username is None and interactive and confirm_choice(
        "Send a WS-Security UsernameToken?", default_yes=False
    ):
        username = safe_input("Username: ") or None
    if username and interactive:
        password = safe_getpass("Password: ")

    try:
        if url is not None:
            url = validate_endpoint_url(url)
        save_settings(
            url=url,
            timeout=args.timeout,
            trust_store=truststore,
            trust_store_password=store_password,
            username=username,
            password=password,
        )
    except ConfigError as e:
        fail(str(e))
        return

    print(f"Settings saved to {CONFIG_FILE}")
    if store_password or password:
        print(f"Secrets stored in: {get_storage_info()}")
