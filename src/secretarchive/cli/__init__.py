"""
CLI commands for secretarchive.
"""

from secretarchive.cli.backup import backup_command

__all__ = [
    "backup_command",
]
