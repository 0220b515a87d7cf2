"""
Token request subcommands: issue, renew, validate.

Prints the STS response (or, with --dry-run, the request envelope) to
stdout, or writes it to --output.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...actions import parse_request
from ...client import WSTrustClient
from ...config import resolve_settings
from ...errors import WSTrustError
from ..helpers import fail, format_size

if TYPE_CHECKING:
    import argparse


def _write_output(data: bytes, output: str | None) -> None:
    if output is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
        sys.stdout.write("\n")
        return
    path = Path(output)
    try:
        path.write_bytes(data)
    except OSError as e:
        fail(f"cannot write {path}: {e}")
    print(f"Saved {format_size(len(data))} to {path}", file=sys.stderr)


def cmd_request(args: argparse.Namespace) -> None:
    """Run an issue/renew/validate command."""
    token_ids = [args.token_id] if getattr(args, "token_id", None) else []

    try:
        request = parse_request(args.command, *token_ids)
        settings = resolve_settings(
            url=args.url,
            timeout=args.timeout,
            trust_store=args.truststore,
        )
        client = WSTrustClient(settings)

        if args.dry_run:
            message = client.build_request(request)
            print(f"Would send {request.action.value} to {settings.endpoint_url}", file=sys.stderr)
            _write_output(message.raw, args.output)
            return

        response = client.send(request)
    except WSTrustError as e:
        fail(str(e))
        return

    if not response.is_soap or response.status >= 300:
        print(
            f"Warning: HTTP {response.status}, content type {response.content_type or 'unknown'}",
            file=sys.stderr,
        )
    _write_output(response.raw, args.output)
