"""
Command-line interface for wstrust.

Argument parsing and dispatch.  Token requests live in ``request``,
configuration in ``setup``, trust store inspection in ``truststore``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ...constants import DEFAULT_ENDPOINT_URL, __version__
from .request import cmd_request
from .setup import cmd_setup
from .truststore import cmd_truststore


def _cmd_reset() -> None:
    """Clear all configuration and saved secrets."""
    from ...config import reset_all

    reset_all()
    print("All configuration cleared.")
    print("Run 'wstrust setup' to reconfigure.")


def _add_request_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--url", default=None, help="STS endpoint (overrides config)")
    parser.add_argument(
        "--truststore", default=None, help="Trust store file (overrides config)"
    )
    parser.add_argument(
        "--timeout", type=int, default=None, help="Timeout in seconds (default: 120)"
    )
    parser.add_argument("-o", "--output", default=None, help="Write the response to a file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the request envelope instead of sending it",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wstrust",
        description="WS-Trust client: issue, renew and validate security tokens.",
        epilog=(
            "Environment variables:\n"
            f"  WSTRUST_URL                  STS endpoint (default: {DEFAULT_ENDPOINT_URL})\n"
            "  WSTRUST_TIMEOUT              Timeout in seconds (default: 120)\n"
            "  WSTRUST_TRUSTSTORE           Trust store file (PEM, DER or PKCS#12)\n"
            "  WSTRUST_TRUSTSTORE_PASSWORD  PKCS#12 trust store password\n"
            "  WSTRUST_USER                 UsernameToken user\n"
            "  WSTRUST_PASS                 UsernameToken password\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"wstrust {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    p_issue = sub.add_parser("issue", help="Request a new security token")
    _add_request_options(p_issue)

    p_renew = sub.add_parser("renew", help="Renew a security token")
    p_renew.add_argument("token_id", help="Security token identifier")
    _add_request_options(p_renew)

    p_validate = sub.add_parser("validate", help="Validate a security token")
    p_validate.add_argument("token_id", help="Security token identifier")
    _add_request_options(p_validate)

    p_setup = sub.add_parser("setup", help="Configure endpoint, trust store and credentials")
    p_setup.add_argument("--url", default=None, help="STS endpoint URL")
    p_setup.add_argument("--truststore", default=None, help="Trust store file")
    p_setup.add_argument("--username", default=None, help="UsernameToken user")
    p_setup.add_argument("--timeout", type=int, default=None, help="Timeout in seconds")
    p_setup.add_argument(
        "--non-interactive",
        action="store_true",
        default=False,
        help="Do not prompt; save only the values given",
    )

    p_store = sub.add_parser("truststore", help="Show trust store certificates")
    p_store.add_argument("path", nargs="?", default=None, help="Trust store file (default: config)")

    sub.add_parser("reset", help="Clear all configuration and saved secrets")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.command in ("issue", "renew", "validate"):
        cmd_request(args)
    elif args.command == "setup":
        cmd_setup(args)
    elif args.command == "truststore":
        cmd_truststore(args)
    elif args.command == "reset":
        _cmd_reset()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
