"""
Expands identifiers into the ordered list of tracks they stand for.
"""

import logging
from typing import Awaitable, Callable, Dict, Iterable, List

from spotify_dl.core.parser import parse_identifier
from spotify_dl.core.service import MetadataService
from spotify_dl.exceptions import (
    AuthenticationError,
    CollectionFetchError,
    InvalidIdentifierError,
)
from spotify_dl.models.config import ResolvePolicy
from spotify_dl.models.metadata import TrackReference
from spotify_dl.models.uri import ResourceKind, SpotifyUri

log = logging.getLogger(__name__)

Expander = Callable[[SpotifyUri, MetadataService], Awaitable[List[TrackReference]]]


def _references(track_uris: Iterable[str], source: SpotifyUri) -> List[TrackReference]:
    """Maps listed track URIs to references, preserving order."""
    references = []
    for track_uri in track_uris:
        try:
            references.append(TrackReference(SpotifyUri.from_uri(track_uri)))
        except (InvalidIdentifierError, ValueError):
            log.warning(
                f"[yellow]Skipping unsupported item {track_uri} in {source}[/yellow]"
            )
    return references


async def expand_track(uri: SpotifyUri, service: MetadataService) -> List[TrackReference]:
    return [TrackReference(uri)]


async def expand_album(uri: SpotifyUri, service: MetadataService) -> List[TrackReference]:
    try:
        album = await service.get_album(uri.id)
    except AuthenticationError:
        raise
    except Exception as e:
        raise CollectionFetchError("album", uri.id) from e
    log.debug(f"Album '{album.name}' lists {len(album.track_uris)} tracks")
    return _references(album.track_uris, uri)


async def expand_playlist(
    uri: SpotifyUri, service: MetadataService
) -> List[TrackReference]:
    try:
        playlist = await service.get_playlist(uri.id, uri.user)
    except AuthenticationError:
        raise
    except Exception as e:
        raise CollectionFetchError("playlist", uri.id) from e
    log.debug(f"Playlist '{playlist.name}' lists {len(playlist.track_uris)} tracks")
    return _references(playlist.track_uris, uri)


async def expand_unsupported(
    uri: SpotifyUri, service: MetadataService
) -> List[TrackReference]:
    log.warning(f"[yellow]Unsupported item type: {uri}[/yellow]")
    return []


EXPANDERS: Dict[ResourceKind, Expander] = {
    ResourceKind.TRACK: expand_track,
    ResourceKind.EPISODE: expand_track,
    ResourceKind.ALBUM: expand_album,
    ResourceKind.PLAYLIST: expand_playlist,
    ResourceKind.OTHER: expand_unsupported,
}


async def resolve_tracks(
    identifiers: Iterable[str],
    service: MetadataService,
    policy: ResolvePolicy = ResolvePolicy.ABORT,
) -> List[TrackReference]:
    """
    Resolves identifiers into track references, concatenated in input order.

    With `ResolvePolicy.ABORT` the first identifier that fails to parse or
    whose album/playlist cannot be fetched aborts the whole call. With
    `ResolvePolicy.SKIP` that identifier is logged and skipped.

    Raises:
        InvalidIdentifierError: An identifier could not be parsed (ABORT only).
        CollectionFetchError: An album or playlist could not be fetched (ABORT only).
        AuthenticationError: The service rejected the access token (either policy).
    """
    tracks: List[TrackReference] = []
    for identifier in identifiers:
        log.debug(f"Getting tracks for: {identifier}")
        try:
            uri = parse_identifier(identifier)
            new_tracks = await EXPANDERS[uri.kind](uri, service)
        except (InvalidIdentifierError, CollectionFetchError) as e:
            if policy is ResolvePolicy.ABORT:
                raise
            log.warning(f"[yellow]Skipping '{identifier}': {e}[/yellow]")
            continue
        tracks.extend(new_tracks)

    log.debug(f"Got {len(tracks)} tracks")
    return tracks
