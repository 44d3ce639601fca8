"""
CLI commands for deploywire.
"""

from deploywire.cli.commands import (
    derive_command,
    kinds_command,
    resolve_command,
    show_command,
)

__all__ = [
    "derive_command",
    "kinds_command",
    "resolve_command",
    "show_command",
]
