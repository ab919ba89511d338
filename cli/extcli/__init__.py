"""extcli - extension command line.

Lists installed extensions and installs extensions from the gallery.
"""

__version__ = "0.1.0"

from cli.extcli.cli import app, main

__all__ = ["__version__", "app", "main"]
