"""Tests for the command-line interface"""

import asyncio

import mutagen.id3 as id3
import pytest
from typer.testing import CliRunner

from spotify_dl import __main__ as entry_point
from spotify_dl.cli import app as app_module
from spotify_dl.exceptions import InvalidIdentifierError, MetadataFetchError
from spotify_dl.models.config import ResolvePolicy
from spotify_dl.models.metadata import TrackReference
from spotify_dl.models.uri import ResourceKind, SpotifyUri

from .conftest import COVER_BYTES

runner = CliRunner()


class FakeClient:
    """Stands in for SpotifyAPIClient, delegating to the in-memory service."""

    def __init__(self, service):
        self.service = service

    async def __aenter__(self):
        return self.service

    async def __aexit__(self, *exc_info):
        return None


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path, service):
    monkeypatch.setattr(app_module, "CONFIG_FILE", tmp_path / "config.ini")
    monkeypatch.setattr(
        app_module, "SpotifyAPIClient", lambda token, parallel: FakeClient(service)
    )


def test_init_writes_config(tmp_path):
    result = runner.invoke(app_module.app, ["init", "token123"])
    assert result.exit_code == 0
    assert "access_token = token123" in (tmp_path / "config.ini").read_text()


def test_resolve_prints_tracks_in_order():
    result = runner.invoke(
        app_module.app,
        ["resolve", "spotify:track:Z", "spotify:album:X", "-a", "token123"],
    )
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if line.startswith("spotify:")]
    assert lines == [
        "spotify:track:Z",
        "spotify:track:T1",
        "spotify:track:T2",
        "spotify:track:T3",
    ]


def test_resolve_aborts_on_invalid_identifier():
    result = runner.invoke(
        app_module.app,
        ["resolve", "spotify:track:A", "not a valid identifier", "-a", "token123"],
    )
    assert result.exit_code != 0
    assert type(result.exception).__name__ == "InvalidIdentifierError"


def test_resolve_skip_invalid():
    result = runner.invoke(
        app_module.app,
        [
            "resolve",
            "spotify:track:A",
            "not a valid identifier",
            "--skip-invalid",
            "-a",
            "token123",
        ],
    )
    assert result.exit_code == 0
    assert "spotify:track:A" in result.output


def test_resolve_requires_token():
    result = runner.invoke(app_module.app, ["resolve", "spotify:track:A"])
    assert result.exit_code != 0
    assert type(result.exception).__name__ == "ConfigurationError"


def test_info_lists_display_strings():
    result = runner.invoke(app_module.app, ["info", "spotify:track:T1", "-a", "tok"])
    assert result.exit_code == 0
    assert "Artist A, Artist B - Song" in result.output


def test_tag_embeds_and_renames(tmp_path):
    path = tmp_path / "download.mp3"
    path.write_bytes(b"\x00" * 256)

    result = runner.invoke(
        app_module.app,
        ["tag", str(path), "spotify:track:T1", "-a", "tok", "-d", str(tmp_path)],
    )
    assert result.exit_code == 0

    renamed = tmp_path / "Artist A, Artist B - Song.mp3"
    assert renamed.exists()
    assert not path.exists()
    audio = id3.ID3(str(renamed))
    assert audio["TIT2"].text == ["Song"]
    assert audio.getall("APIC")[0].data == COVER_BYTES


def test_tag_rejects_collections(tmp_path):
    path = tmp_path / "download.mp3"
    path.write_bytes(b"\x00" * 256)

    result = runner.invoke(
        app_module.app,
        ["tag", str(path), "spotify:album:X", "--no-rename", "-a", "tok"],
    )
    assert result.exit_code == 1
    assert path.exists()


def test_tag_moves_into_destination(tmp_path):
    path = tmp_path / "download.mp3"
    path.write_bytes(b"\x00" * 256)
    library = tmp_path / "library" / "new"

    result = runner.invoke(
        app_module.app,
        ["tag", str(path), "spotify:track:T1", "-a", "tok", "-d", str(library)],
    )
    assert result.exit_code == 0
    assert (library / "Artist A, Artist B - Song.mp3").exists()
    assert not path.exists()


def test_tag_leaves_existing_target_alone(tmp_path):
    path = tmp_path / "download.mp3"
    path.write_bytes(b"\x00" * 256)
    existing = tmp_path / "Artist A, Artist B - Song.mp3"
    existing.write_bytes(b"keep")

    result = runner.invoke(
        app_module.app,
        ["tag", str(path), "spotify:track:T1", "-a", "tok", "-d", str(tmp_path)],
    )
    assert result.exit_code == 0
    assert path.exists()
    assert existing.read_bytes() == b"keep"


def test_rejected_token_fails_even_when_skipping(service):
    service.token_rejected = True
    result = runner.invoke(
        app_module.app, ["info", "spotify:album:X", "--skip-invalid", "-a", "tok"]
    )
    assert result.exit_code != 0
    assert type(result.exception).__name__ == "AuthenticationError"


def track_references(*track_ids):
    return [TrackReference(SpotifyUri(ResourceKind.TRACK, i)) for i in track_ids]


async def test_abort_cancels_fetches_in_flight(service):
    cancelled = []
    serve_track = service.get_track

    async def stalling_get_track(track_id):
        if track_id == "T2":
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(track_id)
                raise
        return await serve_track(track_id)

    service.get_track = stalling_get_track
    service.failing.add("T1")

    with pytest.raises(MetadataFetchError):
        await app_module._fetch_all_metadata(
            track_references("T2", "T1"), service, 2, ResolvePolicy.ABORT
        )
    assert cancelled == ["T2"]


async def test_skip_keeps_the_tracks_that_assembled(service):
    service.failing.add("T1")
    metadata = await app_module._fetch_all_metadata(
        track_references("T1", "T4", "T2"), service, 2, ResolvePolicy.SKIP
    )
    assert [m.name for m in metadata] == ["Plain", "Crowded"]


@pytest.mark.parametrize(
    "error, status",
    [
        (InvalidIdentifierError("nope"), 1),
        (RuntimeError("boom"), 1),
        (KeyboardInterrupt(), 130),
    ],
)
def test_entry_point_exit_status(monkeypatch, error, status):
    def failing_app():
        raise error

    monkeypatch.setattr(entry_point, "app", failing_app)
    with pytest.raises(SystemExit) as excinfo:
        entry_point.main()
    assert excinfo.value.code == status
