"""
Canonical Spotify resource identifiers and the `spotify:` URI grammar.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from spotify_dl.exceptions import InvalidIdentifierError

SCHEME = "spotify"

_BASE62_ID = re.compile(r"[0-9A-Za-z]+")
_WORD = re.compile(r"\w+")


class ResourceKind(Enum):
    """The kinds of resource an identifier can point at."""

    TRACK = "track"
    EPISODE = "episode"
    ALBUM = "album"
    PLAYLIST = "playlist"
    OTHER = "other"


_KNOWN_KINDS = {
    kind.value: kind for kind in ResourceKind if kind is not ResourceKind.OTHER
}


@dataclass(frozen=True)
class SpotifyUri:
    """
    A parsed `spotify:` URI.

    `raw_kind` is only set for unsupported kinds such as `artist` or `show`,
    where it keeps the kind as it was written.
    """

    kind: ResourceKind
    id: str
    user: Optional[str] = None
    raw_kind: Optional[str] = None

    @classmethod
    def from_uri(cls, uri: str) -> "SpotifyUri":
        """
        Parses `spotify:<kind>:<id>` and `spotify:user:<user>:playlist:<id>`.

        Raises:
            InvalidIdentifierError: If the string does not follow the grammar.
        """
        parts = uri.split(":")
        if len(parts) < 3 or parts[0] != SCHEME:
            raise InvalidIdentifierError(uri)

        raw_kind = parts[1]
        if raw_kind == "local":
            # Local files carry artist/album/title/duration, not an id.
            return cls(ResourceKind.OTHER, ":".join(parts[2:]), raw_kind=raw_kind)

        if len(parts) == 5 and raw_kind == "user" and parts[3] == "playlist":
            user, playlist_id = parts[2], parts[4]
            if not user or not _BASE62_ID.fullmatch(playlist_id):
                raise InvalidIdentifierError(uri)
            return cls(ResourceKind.PLAYLIST, playlist_id, user=user)

        if len(parts) != 3:
            raise InvalidIdentifierError(uri)

        resource_id = parts[2]
        if not _WORD.fullmatch(raw_kind) or not _BASE62_ID.fullmatch(resource_id):
            raise InvalidIdentifierError(uri)

        if kind := _KNOWN_KINDS.get(raw_kind):
            return cls(kind, resource_id)
        return cls(ResourceKind.OTHER, resource_id, raw_kind=raw_kind)

    def to_uri(self) -> str:
        """Formats the identifier back into its `spotify:` URI form."""
        if self.kind is ResourceKind.PLAYLIST and self.user:
            return f"{SCHEME}:user:{self.user}:playlist:{self.id}"
        return f"{SCHEME}:{self.raw_kind or self.kind.value}:{self.id}"

    def __str__(self) -> str:
        return self.to_uri()
