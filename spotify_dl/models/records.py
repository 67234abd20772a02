"""
Pydantic models for the records served by the metadata service.

Each record knows how to build itself from the matching Spotify Web API
JSON object via `from_api`.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class CoverImage(_Record):
    """An opaque reference to a cover image; the bytes are fetched separately."""

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class TrackRecord(_Record):
    id: str
    name: str
    duration_ms: int = Field(ge=0)
    album_id: str
    artist_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "TrackRecord":
        return cls(
            id=payload["id"],
            name=payload["name"],
            duration_ms=payload.get("duration_ms", 0),
            album_id=payload["album"]["id"],
            artist_ids=[a["id"] for a in payload.get("artists", []) if a.get("id")],
        )


class ArtistRecord(_Record):
    id: str
    name: str

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ArtistRecord":
        return cls(id=payload["id"], name=payload["name"])


class AlbumRecord(_Record):
    """
    A full album. `track_uris` holds the album's track listing in album order.
    """

    id: str
    name: str
    covers: List[CoverImage] = Field(default_factory=list)
    track_uris: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(
        cls, payload: Dict[str, Any], track_items: Optional[List[Dict[str, Any]]] = None
    ) -> "AlbumRecord":
        if track_items is None:
            track_items = payload.get("tracks", {}).get("items", [])
        return cls(
            id=payload["id"],
            name=payload["name"],
            covers=[CoverImage(**image) for image in payload.get("images") or []],
            track_uris=[item["uri"] for item in track_items if item.get("uri")],
        )


class PlaylistRecord(_Record):
    """A playlist; `track_uris` may contain episodes and local files."""

    id: str
    name: str = ""
    owner: Optional[str] = None
    track_uris: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(
        cls, payload: Dict[str, Any], track_items: Optional[List[Dict[str, Any]]] = None
    ) -> "PlaylistRecord":
        if track_items is None:
            track_items = payload.get("tracks", {}).get("items", [])
        track_uris = []
        for item in track_items:
            # Removed or unavailable entries come back with "track": null
            if (track := item.get("track")) and track.get("uri"):
                track_uris.append(track["uri"])
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            owner=(payload.get("owner") or {}).get("id"),
            track_uris=track_uris,
        )
