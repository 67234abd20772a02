"""Test configuration and fixtures"""

import pytest

from spotify_dl.exceptions import AuthenticationError, MetadataServiceError
from spotify_dl.models.records import (
    AlbumRecord,
    ArtistRecord,
    CoverImage,
    PlaylistRecord,
    TrackRecord,
)

COVER_URL = "https://i.scdn.co/image/cover-x"
COVER_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


class FakeMetadataService:
    """In-memory metadata service that records every lookup it serves."""

    def __init__(self):
        self.tracks: dict[str, TrackRecord] = {}
        self.artists: dict[str, ArtistRecord] = {}
        self.albums: dict[str, AlbumRecord] = {}
        self.playlists: dict[str, PlaylistRecord] = {}
        self.images: dict[str, bytes] = {}
        self.failing: set[str] = set()
        self.token_rejected = False
        self.calls: list[tuple[str, str]] = []

    def _lookup(self, kind: str, key: str, table: dict):
        self.calls.append((kind, key))
        if self.token_rejected:
            raise AuthenticationError("The access token was rejected.")
        if key in self.failing:
            raise MetadataServiceError(f"{kind} {key} unavailable")
        return table[key]

    async def get_track(self, track_id):
        return self._lookup("track", track_id, self.tracks)

    async def get_artist(self, artist_id):
        return self._lookup("artist", artist_id, self.artists)

    async def get_album(self, album_id):
        return self._lookup("album", album_id, self.albums)

    async def get_playlist(self, playlist_id, user=None):
        return self._lookup("playlist", playlist_id, self.playlists)

    async def get_image(self, cover):
        return self._lookup("image", cover.url, self.images)


@pytest.fixture
def service():
    """A service holding one album "X" (T1, T2, T3), a playlist and four artists."""
    fake = FakeMetadataService()
    for artist_id in ("A", "B", "C", "D"):
        fake.artists[artist_id] = ArtistRecord(id=artist_id, name=f"Artist {artist_id}")

    fake.albums["X"] = AlbumRecord(
        id="X",
        name="Album X",
        covers=[CoverImage(url=COVER_URL, width=640, height=640)],
        track_uris=["spotify:track:T1", "spotify:track:T2", "spotify:track:T3"],
    )
    fake.albums["NOCOVER"] = AlbumRecord(
        id="NOCOVER", name="Bare Album", track_uris=["spotify:track:T4"]
    )
    fake.images[COVER_URL] = COVER_BYTES

    fake.tracks["T1"] = TrackRecord(
        id="T1", name="Song", duration_ms=180000, album_id="X", artist_ids=["A", "B"]
    )
    fake.tracks["T2"] = TrackRecord(
        id="T2",
        name="Crowded",
        duration_ms=200500,
        album_id="X",
        artist_ids=["A", "B", "C", "D"],
    )
    fake.tracks["T4"] = TrackRecord(
        id="T4", name="Plain", duration_ms=1000, album_id="NOCOVER", artist_ids=["C"]
    )

    fake.playlists["PL1"] = PlaylistRecord(
        id="PL1",
        name="Mix",
        owner="alice",
        track_uris=[
            "spotify:track:T3",
            "spotify:episode:E1",
            "spotify:local:Artist:Album:Title:200",
            "spotify:track:T1",
        ],
    )
    return fake
