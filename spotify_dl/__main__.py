"""
Entry point for `spotify-dl` and `python -m spotify_dl`.

Runs the Typer app and renders any error that escapes a command, such as a
rejected access token, as a rich panel with suggestions and exit status 1.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from spotify_dl.cli.app import app
from spotify_dl.cli.formatters import format_error_with_suggestions
from spotify_dl.exceptions import SpotifyDlError

log = logging.getLogger("spotify_dl")


def _use_utf8_output() -> None:
    # Track and artist names are printed verbatim; Windows consoles default to a code page
    if os.name != "nt":
        return
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass


def main() -> None:
    _use_utf8_output()
    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Cancelled.[/yellow]")
        sys.exit(130)
    except SpotifyDlError as e:
        console.print(format_error_with_suggestions(e))
        log.debug("Caused by:", exc_info=e.__cause__)
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
