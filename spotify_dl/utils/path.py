"""
Utilities for building safe file names and output paths.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Union

from pathvalidate import sanitize_filename

if TYPE_CHECKING:
    from spotify_dl.models.metadata import TrackMetadata


def clean_filename(name: str) -> str:
    """Strips characters that are invalid in file names on any platform."""
    return sanitize_filename(name, platform="universal")


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def output_path(
    destination: Union[str, Path], metadata: "TrackMetadata", ext: str
) -> Path:
    """
    Builds `<destination>/<display string>.<ext>` for a track.
    """
    ext = ext.lstrip(".")
    return Path(destination).expanduser() / f"{metadata.display_string()}.{ext}"
