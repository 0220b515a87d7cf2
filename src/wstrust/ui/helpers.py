"""Shared terminal helpers for the CLI."""

from __future__ import annotations

import getpass
import sys

from ..constants import BYTES_PER_MB


def safe_input(prompt: str) -> str | None:
    """Prompt user for input, returning None on EOF/KeyboardInterrupt.

    Args:
        prompt: The prompt string to display.

    Returns:
        Stripped user input, or None if cancelled (Ctrl-C, Ctrl-D).
    """
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def safe_getpass(prompt: str) -> str | None:
    """Like :func:`safe_input` but without echo."""
    try:
        return getpass.getpass(prompt)
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def confirm_choice(message: str, default_yes: bool = True) -> bool:
    """
    Prompt user for yes/no confirmation.

    Returns:
        True if the user confirmed; the default on empty input; False on
        cancel.
    """
    suffix = " [Y/n] " if default_yes else " [y/N] "
    answer = safe_input(message + suffix)
    if answer is None:
        return False
    if not answer:
        return default_yes
    return answer.lower() in ("y", "yes")


def format_size(size: int) -> str:
    """Format a byte count as a short human-readable string."""
    if size >= BYTES_PER_MB:
        return f"{size / BYTES_PER_MB:.1f} MB"
    if size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} bytes"


def fail(message: str) -> None:
    """Print an error to stderr and exit with status 1."""
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)
