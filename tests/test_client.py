"""Tests for the Spotify Web API client's record mapping"""

import pytest

from spotify_dl.api.client import SpotifyAPIClient
from spotify_dl.api.rate_limiter import AdaptiveRateLimiter
from spotify_dl.exceptions import AuthenticationError, MetadataServiceError

NEXT_PAGE = "https://api.spotify.com/v1/albums/X/tracks?offset=2&limit=2"

RESPONSES = {
    "tracks/T1": {
        "id": "T1",
        "name": "Song",
        "duration_ms": 180000,
        "album": {"id": "X", "name": "Album X"},
        "artists": [{"id": "A", "name": "Artist A"}, {"id": "B", "name": "Artist B"}],
    },
    "artists/A": {"id": "A", "name": "Artist A", "genres": []},
    "albums/X": {
        "id": "X",
        "name": "Album X",
        "images": [
            {"url": "https://i.scdn.co/image/640", "width": 640, "height": 640},
            {"url": "https://i.scdn.co/image/300", "width": 300, "height": 300},
        ],
        "tracks": {
            "items": [
                {"uri": "spotify:track:T1", "id": "T1"},
                {"uri": "spotify:track:T2", "id": "T2"},
            ],
            "next": NEXT_PAGE,
        },
    },
    NEXT_PAGE: {"items": [{"uri": "spotify:track:T3", "id": "T3"}], "next": None},
    "playlists/PL1": {
        "id": "PL1",
        "name": "Mix",
        "owner": {"id": "alice"},
        "tracks": {
            "items": [
                {"track": {"uri": "spotify:track:T3"}},
                {"track": None},
                {"track": {"uri": "spotify:episode:E1"}},
            ],
            "next": None,
        },
    },
    "tracks/BROKEN": {"id": "BROKEN", "name": "No album"},
}


@pytest.fixture
def client(monkeypatch):
    client = SpotifyAPIClient("token")
    requested = []

    async def fake_api_call(endpoint, **params):
        requested.append(endpoint)
        return RESPONSES[endpoint]

    monkeypatch.setattr(client, "api_call", fake_api_call)
    client.requested = requested
    return client


async def test_get_track(client):
    record = await client.get_track("T1")
    assert record.name == "Song"
    assert record.album_id == "X"
    assert record.artist_ids == ["A", "B"]
    assert record.duration_ms == 180000


async def test_get_artist(client):
    assert (await client.get_artist("A")).name == "Artist A"


async def test_get_album_follows_pagination(client):
    record = await client.get_album("X")
    assert record.track_uris == [
        "spotify:track:T1",
        "spotify:track:T2",
        "spotify:track:T3",
    ]
    assert [cover.width for cover in record.covers] == [640, 300]
    assert client.requested == ["albums/X", NEXT_PAGE]


async def test_get_playlist_drops_unavailable_entries(client):
    record = await client.get_playlist("PL1", user="alice")
    assert record.owner == "alice"
    assert record.track_uris == ["spotify:track:T3", "spotify:episode:E1"]


async def test_malformed_payload(client):
    with pytest.raises(MetadataServiceError):
        await client.get_track("BROKEN")


async def test_rate_limiter_backs_off_on_429():
    limiter = AdaptiveRateLimiter(initial_calls_per_second=8.0)
    await limiter.on_429()
    assert limiter.rate == 4.0
    await limiter.on_429()
    await limiter.on_429()
    await limiter.on_429()
    assert limiter.rate == 1.0


class FakeResponse:
    def __init__(self, status=200, payload=None, headers=None):
        self.status = status
        self.headers = headers or {}
        self._payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def json(self):
        return self._payload


class FakeSession:
    """Replays queued responses and records each GET it receives."""

    closed = False

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, headers=None):
        self.requests.append((url, params, headers))
        return self.responses.pop(0)

    async def close(self):
        self.closed = True


def client_with(*responses):
    client = SpotifyAPIClient("token")
    client._session = FakeSession(*responses)
    return client


class TestApiCall:
    async def test_relative_endpoint_is_authorized(self):
        client = client_with(FakeResponse(payload={"id": "A", "name": "Artist A"}))

        assert (await client.get_artist("A")).name == "Artist A"
        url, params, headers = client._session.requests[0]
        assert url == "https://api.spotify.com/v1/artists/A"
        assert params is None
        assert headers == {"Authorization": "Bearer token"}

    async def test_next_links_are_requested_as_is(self):
        first_page = dict(RESPONSES["albums/X"])
        client = client_with(
            FakeResponse(payload=first_page), FakeResponse(payload=RESPONSES[NEXT_PAGE])
        )

        record = await client.get_album("X")
        assert [r[0] for r in client._session.requests] == [
            "https://api.spotify.com/v1/albums/X",
            NEXT_PAGE,
        ]
        assert record.track_uris[-1] == "spotify:track:T3"

    async def test_query_parameters_are_sent(self):
        client = client_with(FakeResponse(payload=RESPONSES["playlists/PL1"]))
        await client.get_playlist("PL1")
        assert "fields" in client._session.requests[0][1]

    async def test_401_is_an_authentication_error(self):
        client = client_with(FakeResponse(status=401))
        with pytest.raises(AuthenticationError):
            await client.get_track("T1")

    async def test_429_slows_down_and_fails_the_call(self):
        client = client_with(FakeResponse(status=429, headers={"Retry-After": "0"}))
        with pytest.raises(MetadataServiceError, match="429"):
            await client.get_track("T1")
        assert client._rate_limiter.rate == 5.0

    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_error_statuses(self, status):
        client = client_with(FakeResponse(status=status))
        with pytest.raises(MetadataServiceError, match=str(status)):
            await client.get_track("T1")
        assert client._rate_limiter.rate == 10.0

    async def test_close_closes_the_session(self):
        client = client_with()
        session = client._session
        await client.close()
        assert session.closed
