"""
Data Models Layer.

This package contains the core data structures used throughout the
application: parsed identifiers, service records, assembled track metadata,
and the validated configuration.
"""

from .config import DownloadConfig, ResolvePolicy
from .metadata import (
    AlbumMetadata,
    ArtistMetadata,
    CoverRetriever,
    Tags,
    TrackMetadata,
    TrackReference,
)
from .records import AlbumRecord, ArtistRecord, CoverImage, PlaylistRecord, TrackRecord
from .uri import ResourceKind, SpotifyUri

__all__ = [
    "AlbumMetadata",
    "AlbumRecord",
    "ArtistMetadata",
    "ArtistRecord",
    "CoverImage",
    "CoverRetriever",
    "DownloadConfig",
    "PlaylistRecord",
    "ResolvePolicy",
    "ResourceKind",
    "SpotifyUri",
    "Tags",
    "TrackMetadata",
    "TrackRecord",
    "TrackReference",
]
