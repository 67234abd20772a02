"""
Parses user input, either a `spotify:` URI or an open.spotify.com link, into a SpotifyUri.
"""

import logging
import re
from typing import Optional

from spotify_dl.exceptions import InvalidIdentifierError
from spotify_dl.models.uri import SCHEME, SpotifyUri

log = logging.getLogger(__name__)

# Matches a link anywhere in the input; the optional /intl-xx locale segment
# and any query string are ignored.
SPOTIFY_URL_PATTERN = re.compile(
    r"https://open\.spotify\.com(?:/intl-[a-z]{2})?/(?P<kind>\w+)/(?P<id>[a-zA-Z0-9]+)"
)


def parse_uri(value: str) -> Optional[SpotifyUri]:
    """Parses a `spotify:` URI, returning None if it does not follow the grammar."""
    try:
        uri = SpotifyUri.from_uri(value)
    except InvalidIdentifierError:
        log.debug(f"Not a Spotify URI: '{value}'")
        return None
    log.debug(f"Parsed URI: {uri!r}")
    return uri


def parse_url(value: str) -> Optional[SpotifyUri]:
    """
    Parses an open.spotify.com link by rewriting it as `spotify:<kind>:<id>`
    and handing that to the URI parser.
    """
    match = SPOTIFY_URL_PATTERN.search(value)
    if not match:
        log.debug(f"Not a Spotify URL: '{value}'")
        return None
    return parse_uri(f"{SCHEME}:{match.group('kind')}:{match.group('id')}")


def parse_identifier(value: str) -> SpotifyUri:
    """
    Parses a URI or web link into a SpotifyUri.

    Raises:
        InvalidIdentifierError: If neither form matches.
    """
    value = value.strip()
    uri = parse_uri(value) or parse_url(value)
    if uri is None:
        raise InvalidIdentifierError(value)
    return uri
