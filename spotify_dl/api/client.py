"""
Async client for the Spotify Web API, serving the records the resolver and
metadata assembler need.
"""

import logging
import time
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, TypeVar

import aiohttp
from pydantic import ValidationError

from spotify_dl.exceptions import AuthenticationError, MetadataServiceError
from spotify_dl.models.records import (
    AlbumRecord,
    ArtistRecord,
    CoverImage,
    PlaylistRecord,
    TrackRecord,
)

from .rate_limiter import AdaptiveRateLimiter

log = logging.getLogger(__name__)

R = TypeVar("R")


class SpotifyAPIClient:
    """
    Async client for the Spotify Web API (v1).

    Features:
    - Bearer token authorization on API calls
    - Adaptive rate limiting
    - Connection pooling
    - Transparent pagination of album and playlist track listings
    """

    BASE_URL = "https://api.spotify.com/v1/"
    PAGE_LIMIT = 50

    def __init__(self, access_token: str, max_workers: int = 5):
        """
        Args:
            access_token: OAuth access token for the Web API.
            max_workers: The number of concurrent callers, used to tune the connection pool.
        """
        self.access_token = access_token
        self.max_workers = max_workers
        self._session: Optional[aiohttp.ClientSession] = None
        self._rate_limiter = AdaptiveRateLimiter()

    async def __aenter__(self) -> "SpotifyAPIClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_workers * 2,
                limit_per_host=self.max_workers,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "User-Agent": "spotify-dl",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=aiohttp.ClientTimeout(total=60, connect=15, sock_read=30),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def api_call(self, endpoint: str, **params: Any) -> Dict[str, Any]:
        """
        Makes an authorized GET request to the Web API and returns the decoded JSON.

        `endpoint` is either relative to BASE_URL or an absolute URL, as found in
        the `next` field of paged responses.
        """
        await self._initialize_session()
        await self._rate_limiter.acquire()

        url = endpoint if endpoint.startswith("https://") else self.BASE_URL + endpoint
        headers = {"Authorization": f"Bearer {self.access_token}"}
        start_time = time.monotonic()

        async with self._session.get(url, params=params or None, headers=headers) as r:
            duration_ms = (time.monotonic() - start_time) * 1000
            log.debug(f"GET {endpoint} -> {r.status} ({duration_ms:.0f} ms)")

            if r.status == 401:
                raise AuthenticationError(
                    "The access token was rejected. It may have expired."
                )
            if r.status == 429:
                retry_after = r.headers.get("Retry-After")
                await self._rate_limiter.on_429(
                    float(retry_after) if retry_after and retry_after.isdigit() else None
                )
            if r.status >= 400:
                raise MetadataServiceError(f"GET {endpoint} returned HTTP {r.status}")

            return await r.json()

    async def _yield_paginated(
        self, page: Dict[str, Any]
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        Yields every item of a paging object, following its `next` links.
        """
        while True:
            for item in page.get("items", []):
                yield item
            next_url = page.get("next")
            if not next_url:
                break
            page = await self.api_call(next_url)

    async def _collect(self, page: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [item async for item in self._yield_paginated(page)]

    @staticmethod
    def _build(builder: Callable[..., R], *args: Any) -> R:
        try:
            return builder(*args)
        except (KeyError, TypeError, ValidationError) as e:
            raise MetadataServiceError(f"Unexpected API payload: {e}") from e

    # Public API Methods
    async def get_track(self, track_id: str) -> TrackRecord:
        payload = await self.api_call(f"tracks/{track_id}")
        return self._build(TrackRecord.from_api, payload)

    async def get_artist(self, artist_id: str) -> ArtistRecord:
        payload = await self.api_call(f"artists/{artist_id}")
        return self._build(ArtistRecord.from_api, payload)

    async def get_album(self, album_id: str) -> AlbumRecord:
        payload = await self.api_call(f"albums/{album_id}")
        track_items = await self._collect(payload.get("tracks", {}))
        return self._build(AlbumRecord.from_api, payload, track_items)

    async def get_playlist(
        self, playlist_id: str, user: Optional[str] = None
    ) -> PlaylistRecord:
        # Playlist ids are global; the owner qualifier is not part of the API path.
        payload = await self.api_call(
            f"playlists/{playlist_id}",
            fields="id,name,owner(id),tracks(items(track(uri)),next)",
        )
        track_items = await self._collect(payload.get("tracks", {}))
        record = self._build(PlaylistRecord.from_api, payload, track_items)
        if user and record.owner and record.owner != user:
            log.debug(
                f"Playlist {playlist_id} is owned by '{record.owner}', not '{user}'"
            )
        return record

    async def get_image(self, cover: CoverImage) -> bytes:
        """Downloads the bytes of a cover image. Image hosts need no authorization."""
        await self._initialize_session()
        async with self._session.get(cover.url) as r:
            r.raise_for_status()
            return await r.read()
