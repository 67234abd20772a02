"""
Track references, assembled track metadata, and the tags derived from it.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from spotify_dl.models.records import AlbumRecord, ArtistRecord, CoverImage, TrackRecord
from spotify_dl.models.uri import ResourceKind, SpotifyUri
from spotify_dl.utils.path import clean_filename

if TYPE_CHECKING:
    from spotify_dl.core.service import MetadataService

log = logging.getLogger(__name__)

# Decoded PCM assumed by approx_size: 44.1 kHz, stereo, 32-bit samples.
SAMPLE_RATE = 44100
CHANNELS = 2
BYTES_PER_SAMPLE = 4

MAX_DISPLAYED_ARTISTS = 3

_PLAYABLE_KINDS = (ResourceKind.TRACK, ResourceKind.EPISODE)


@dataclass(frozen=True)
class TrackReference:
    """A playable item (track or episode) that has not been fetched yet."""

    uri: SpotifyUri

    def __post_init__(self):
        if self.uri.kind not in _PLAYABLE_KINDS:
            raise ValueError(f"Not a track or episode: {self.uri}")

    @property
    def id(self) -> str:
        return self.uri.id

    def __str__(self) -> str:
        return str(self.uri)


@dataclass(frozen=True)
class ArtistMetadata:
    name: str

    @classmethod
    def from_record(cls, record: ArtistRecord) -> "ArtistMetadata":
        return cls(name=record.name)


@dataclass(frozen=True)
class AlbumMetadata:
    name: str
    covers: Tuple[CoverImage, ...] = ()

    @classmethod
    def from_record(cls, record: AlbumRecord) -> "AlbumMetadata":
        return cls(name=record.name, covers=tuple(record.covers))


@dataclass(frozen=True)
class CoverRetriever:
    """
    Deferred access to an album's cover art.

    Awaiting the retriever fetches the first cover from the service every
    time it is called; nothing is cached. Any failure yields None, since cover
    art is optional enrichment.
    """

    covers: Tuple[CoverImage, ...]
    service: "MetadataService" = field(repr=False, compare=False)

    async def __call__(self) -> Optional[bytes]:
        if not self.covers:
            return None
        cover = self.covers[0]
        try:
            return await self.service.get_image(cover)
        except Exception as e:
            log.debug(f"Could not fetch cover art from {cover.url}: {e}")
            return None


@dataclass(frozen=True)
class Tags:
    """The values embedded into an output file."""

    title: str
    artists: List[str]
    album_title: str
    album_cover: Optional[bytes] = field(default=None, repr=False)


@dataclass(frozen=True)
class TrackMetadata:
    artists: Tuple[ArtistMetadata, ...]
    name: str
    album: AlbumMetadata
    duration_ms: int
    cover_retriever: CoverRetriever = field(repr=False, compare=False)

    @classmethod
    def from_records(
        cls,
        track: TrackRecord,
        artists: List[ArtistRecord],
        album: AlbumRecord,
        cover_retriever: CoverRetriever,
    ) -> "TrackMetadata":
        return cls(
            artists=tuple(ArtistMetadata.from_record(a) for a in artists),
            name=track.name,
            album=AlbumMetadata.from_record(album),
            duration_ms=track.duration_ms,
            cover_retriever=cover_retriever,
        )

    @property
    def artist_names(self) -> List[str]:
        return [artist.name for artist in self.artists]

    def approx_size(self) -> int:
        """
        Estimates the decoded audio size in bytes, assuming uncompressed PCM
        regardless of the output format. Only meant for progress display.
        """
        seconds = self.duration_ms // 1000
        return seconds * SAMPLE_RATE * CHANNELS * BYTES_PER_SAMPLE

    async def tags(self) -> Tags:
        """Builds the embeddable tags, fetching the cover art once."""
        return Tags(
            title=self.name,
            artists=self.artist_names,
            album_title=self.album.name,
            album_cover=await self.cover_retriever(),
        )

    def display_string(self) -> str:
        """
        Returns "Artist A, Artist B - Title", listing at most three artists,
        sanitized for use as a file name.
        """
        names = self.artist_names
        if len(names) > MAX_DISPLAYED_ARTISTS:
            shown = ", ".join(names[:MAX_DISPLAYED_ARTISTS])
            return clean_filename(f"{shown}, ... - {self.name}")
        return clean_filename(f"{', '.join(names)} - {self.name}")

    def __str__(self) -> str:
        return self.display_string()
