"""
The contract the resolver and the metadata assembler expect from a metadata service.
"""

from typing import Optional, Protocol

from spotify_dl.models.records import (
    AlbumRecord,
    ArtistRecord,
    CoverImage,
    PlaylistRecord,
    TrackRecord,
)


class MetadataService(Protocol):
    """
    Read-only lookups of Spotify records and image bytes.

    Implementations may raise any exception on failure; callers decide
    whether a failure is fatal.
    """

    async def get_track(self, track_id: str) -> TrackRecord: ...

    async def get_artist(self, artist_id: str) -> ArtistRecord: ...

    async def get_album(self, album_id: str) -> AlbumRecord: ...

    async def get_playlist(
        self, playlist_id: str, user: Optional[str] = None
    ) -> PlaylistRecord: ...

    async def get_image(self, cover: CoverImage) -> bytes: ...
