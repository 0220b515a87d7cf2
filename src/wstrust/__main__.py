"""
Entry point for `python -m wstrust`.

Usage:
    python -m wstrust issue
    python -m wstrust renew <token-id>
    python -m wstrust validate <token-id>
"""

from .ui.cli import main

main()
