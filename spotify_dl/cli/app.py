"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from spotify_dl import __version__
from spotify_dl.api.client import SpotifyAPIClient
from spotify_dl.core.assembler import fetch_track_metadata
from spotify_dl.core.resolver import resolve_tracks
from spotify_dl.exceptions import MetadataFetchError
from spotify_dl.media import Tagger
from spotify_dl.models.config import DownloadConfig, ResolvePolicy
from spotify_dl.models.metadata import TrackMetadata, TrackReference
from spotify_dl.storage.config_manager import ConfigManager
from spotify_dl.utils.path import create_dir, output_path

from .formatters import (
    print_config,
    print_references,
    print_tracks_table,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("spotify_dl")

app = typer.Typer(
    name="spotify-dl",
    help=(
        "Resolve Spotify URIs and links into tracks, inspect their metadata and"
        " tag local files. Use 'spotify-dl <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "spotify-dl"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict[str, Any]) -> DownloadConfig:
    """Loads the config file with the non-None CLI options layered on top."""
    overrides = {key: value for key, value in cli_options.items() if value is not None}
    return ConfigManager(CONFIG_FILE).load_config(overrides)


def _policy_option(skip_invalid: bool | None) -> ResolvePolicy | None:
    if skip_invalid is None:
        return None
    return ResolvePolicy.SKIP if skip_invalid else ResolvePolicy.ABORT


def _read_identifiers_from_stdin() -> list[str]:
    """Reads identifiers from stdin, one per line, ignoring blanks and # comments."""
    if sys.stdin.isatty():
        console.print(
            "[yellow]⚠️  No input detected on stdin. Please pipe identifiers or"
            " redirect a file.[/yellow]"
        )
        raise typer.Exit(code=1)

    identifiers = []
    for line in sys.stdin:
        line = line.strip()
        if line and not line.startswith("#"):
            identifiers.append(line)

    if not identifiers:
        console.print("[yellow]⚠️  No identifiers found in stdin.[/yellow]")
        raise typer.Exit(code=1)
    return identifiers


def _collect_identifiers(identifiers: list[str] | None, stdin: bool) -> list[str]:
    if stdin:
        if identifiers:
            console.print(
                "[yellow]⚠️  Both identifiers and --stdin provided. Using --stdin"
                " only.[/yellow]"
            )
        return _read_identifiers_from_stdin()
    if not identifiers:
        console.print(
            "[red]✗ No identifiers provided.[/red] "
            "Pass Spotify URIs/links or use [cyan]--stdin[/cyan]."
        )
        raise typer.Exit(code=1)
    return identifiers


async def _fetch_all_metadata(
    references: list[TrackReference],
    client: SpotifyAPIClient,
    parallel: int,
    policy: ResolvePolicy,
) -> list[TrackMetadata]:
    """
    Assembles metadata for every reference, at most `parallel` at a time,
    returning results in reference order.

    Under `ResolvePolicy.ABORT` the first failure cancels the fetches still
    running.
    """
    semaphore = asyncio.Semaphore(parallel)

    async def fetch(reference: TrackReference) -> TrackMetadata | None:
        async with semaphore:
            try:
                return await fetch_track_metadata(reference, client)
            except MetadataFetchError as e:
                if policy is ResolvePolicy.ABORT:
                    raise
                log.warning(f"[yellow]Skipping {reference}: {e}[/yellow]")
                return None

    tasks = [asyncio.ensure_future(fetch(r)) for r in references]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # Stop fetches still in flight before the client session closes
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return [metadata for metadata in results if metadata is not None]


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity.",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """spotify-dl"""
    if version:
        console.print(f"[bold]spotify-dl[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    if verbose:
        logging.getLogger("spotify_dl").setLevel("DEBUG")

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]spotify-dl init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config = _load_config({})
        print_config(
            CONFIG_FILE,
            config.model_dump(mode="json", exclude={"config_path", "identifiers"}),
        )
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    access_token: str = typer.Argument(..., help="Spotify Web API access token."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize configuration with a Spotify access token."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_new_config({"access_token": access_token})
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def resolve(
    identifiers: list[str] | None = typer.Argument(  # noqa: B008
        None, help="Spotify URIs or links (tracks, episodes, albums or playlists)."
    ),
    access_token: str | None = typer.Option(
        None, "--access-token", "-a", help="Access token (overrides the config)."
    ),
    skip_invalid: bool | None = typer.Option(
        None,
        "--skip-invalid/--abort-on-invalid",
        help="Skip identifiers that cannot be parsed or fetched instead of failing.",
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read identifiers from standard input, one per line."
    ),
):
    """List the tracks the given identifiers resolve to."""
    identifiers = _collect_identifiers(identifiers, stdin)
    config = _load_config(
        {
            "access_token": access_token,
            "on_error": _policy_option(skip_invalid),
            "identifiers": identifiers,
        }
    )

    async def _resolve_async():
        async with SpotifyAPIClient(config.access_token, config.parallel) as client:
            return await resolve_tracks(config.identifiers, client, config.on_error)

    print_references(asyncio.run(_resolve_async()))


@app.command()
def info(
    identifiers: list[str] | None = typer.Argument(  # noqa: B008
        None, help="Spotify URIs or links (tracks, episodes, albums or playlists)."
    ),
    access_token: str | None = typer.Option(
        None, "--access-token", "-a", help="Access token (overrides the config)."
    ),
    parallel: int | None = typer.Option(
        None, "--parallel", "-t", help="Number of tracks fetched concurrently."
    ),
    skip_invalid: bool | None = typer.Option(
        None,
        "--skip-invalid/--abort-on-invalid",
        help="Skip items that cannot be parsed or fetched instead of failing.",
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read identifiers from standard input, one per line."
    ),
):
    """Show title, artists, album and estimated size of every resolved track."""
    identifiers = _collect_identifiers(identifiers, stdin)
    config = _load_config(
        {
            "access_token": access_token,
            "parallel": parallel,
            "on_error": _policy_option(skip_invalid),
            "identifiers": identifiers,
        }
    )

    async def _info_async():
        async with SpotifyAPIClient(config.access_token, config.parallel) as client:
            references = await resolve_tracks(
                config.identifiers, client, config.on_error
            )
            return await _fetch_all_metadata(
                references, client, config.parallel, config.on_error
            )

    print_tracks_table(asyncio.run(_info_async()))


@app.command()
def tag(
    file: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, writable=True, help="A .flac or .mp3 file."
    ),
    identifier: str = typer.Argument(..., help="Spotify URI or link of the track."),
    access_token: str | None = typer.Option(
        None, "--access-token", "-a", help="Access token (overrides the config)."
    ),
    embed_cover: bool | None = typer.Option(
        None, "--embed-cover/--no-cover", help="Embed the album cover in the file."
    ),
    rename: bool | None = typer.Option(
        None,
        "--rename/--no-rename",
        help="Rename to 'Artists - Title' in the destination after tagging.",
    ),
    destination: str | None = typer.Option(
        None,
        "--destination",
        "-d",
        help="Directory the renamed file is moved into (overrides the config).",
    ),
):
    """Embed a track's title, artists, album and cover into a local audio file."""
    config = _load_config(
        {
            "access_token": access_token,
            "embed_cover": embed_cover,
            "rename": rename,
            "destination": destination,
        }
    )

    async def _tag_async():
        async with SpotifyAPIClient(config.access_token, config.parallel) as client:
            references = await resolve_tracks([identifier], client)
            if len(references) != 1:
                console.print(
                    f"[red]✗ '{escape(identifier)}' resolves to {len(references)}"
                    " tracks; expected exactly one.[/red]"
                )
                raise typer.Exit(code=1)
            metadata = await fetch_track_metadata(references[0], client)
            return metadata, await metadata.tags()

    metadata, tags = asyncio.run(_tag_async())

    if not Tagger(config.embed_cover).tag_file(str(file), tags):
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Tagged[/green] {escape(file.name)}")

    if config.rename:
        target = output_path(config.destination, metadata, file.suffix)
        if target.resolve() != file.resolve():
            if target.exists():
                console.print(
                    f"[yellow]○ Not renaming: {escape(target.name)} already"
                    " exists.[/yellow]"
                )
            else:
                create_dir(target.parent)
                shutil.move(file, target)
                console.print(f"[green]✓ Moved to[/green] {escape(str(target))}")


@app.command()
def validate():
    """Validate the current configuration."""
    config = _load_config({})
    print_validation_table(config)

