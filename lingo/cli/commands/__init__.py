"""
CLI Commands.

Organized by feature area.
"""

from lingo.cli.commands.auth import app as auth_app
from lingo.cli.commands.notes import app as notes_app
from lingo.cli.commands.study import app as study_app

__all__ = [
    "auth_app",
    "notes_app",
    "study_app",
]
