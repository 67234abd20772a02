"""
Assembles the descriptive metadata of a single track from the metadata service.
"""

import logging

from spotify_dl.core.service import MetadataService
from spotify_dl.exceptions import AuthenticationError, MetadataFetchError
from spotify_dl.models.metadata import CoverRetriever, TrackMetadata, TrackReference

log = logging.getLogger(__name__)


async def fetch_track_metadata(
    track: TrackReference, service: MetadataService
) -> TrackMetadata:
    """
    Fetches the track, each of its artists in order, then its album.

    Requests are issued one at a time so the artist list keeps the order the
    service lists it in. The cover art is not fetched here; the returned
    metadata only carries a retriever for it.

    Raises:
        MetadataFetchError: With subject "track", "artist" or "album" for the
            first lookup that failed.
        AuthenticationError: The service rejected the access token.
    """
    log.debug(f"Fetching metadata for {track}")
    try:
        record = await service.get_track(track.id)
    except AuthenticationError:
        raise
    except Exception as e:
        raise MetadataFetchError("track", track.id) from e

    artists = []
    for artist_id in record.artist_ids:
        try:
            artists.append(await service.get_artist(artist_id))
        except AuthenticationError:
            raise
        except Exception as e:
            raise MetadataFetchError("artist", artist_id) from e

    try:
        album = await service.get_album(record.album_id)
    except AuthenticationError:
        raise
    except Exception as e:
        raise MetadataFetchError("album", record.album_id) from e

    cover_retriever = CoverRetriever(covers=tuple(album.covers), service=service)
    return TrackMetadata.from_records(record, artists, album, cover_retriever)
