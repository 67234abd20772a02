"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spotify_dl.models.config import DownloadConfig
from spotify_dl.models.metadata import TrackMetadata, TrackReference
from spotify_dl.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Access tokens expire after an hour; fetch a new one.",
            "• Run `spotify-dl init <TOKEN> --force` or pass --access-token.",
        ],
        "InvalidIdentifierError": [
            "• Use a Spotify URI such as spotify:track:<id>.",
            "• Or a web link such as https://open.spotify.com/album/<id>.",
        ],
        "CollectionFetchError": [
            "• The album or playlist may be private or unavailable in your region.",
            "• Use --skip-invalid to continue with the remaining identifiers.",
        ],
        "MetadataFetchError": [
            "• The track may have been removed from Spotify.",
            "• Podcast episodes are not served by the track endpoint.",
        ],
        "ConfigurationError": [
            "• Run `spotify-dl validate` to check your configuration.",
            "• Run `spotify-dl init <TOKEN>` to create a new one.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• Check your internet connection and try again.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_references(references: Sequence[TrackReference]) -> None:
    """Prints resolved track references, one URI per line."""
    console = Console()
    for reference in references:
        console.print(str(reference), highlight=False)
    console.print(f"[dim]{len(references)} track(s) resolved.[/dim]")


def print_tracks_table(tracks: Sequence[TrackMetadata]) -> None:
    """Displays assembled track metadata in a table."""
    console = Console()
    table = Table(title="Tracks", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Track", style="white")
    table.add_column("Album", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Approx. size", justify="right", style="green")

    for index, track in enumerate(tracks, start=1):
        table.add_row(
            str(index),
            track.display_string(),
            track.album.name,
            format_duration(track.duration_ms),
            format_size(track.approx_size()),
        )

    console.print(table)
    total = sum(track.approx_size() for track in tracks)
    console.print(f"[dim]{len(tracks)} track(s), ~{format_size(total)} decoded.[/dim]")


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding the access token."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "access_token":
            value = "********" if value else "[red]not set[/red]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: DownloadConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Access Token:", "[green]✓ Present[/green]")
    table.add_row("Destination:", f"[dim]{config.destination}[/dim]")
    table.add_row("Parallel:", str(config.parallel))
    table.add_row("On Error:", config.on_error.value)
    table.add_row("Embed Cover:", "✓ Enabled" if config.embed_cover else "✗ Disabled")
    table.add_row("Rename Files:", "✓ Enabled" if config.rename else "✗ Disabled")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )
