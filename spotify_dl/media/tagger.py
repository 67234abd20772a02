"""
Writes assembled track tags into FLAC and MP3 files.
"""

import logging
import os
from typing import Optional

import mutagen.id3 as id3
from mutagen.flac import FLAC, Picture
from mutagen.id3 import ID3NoHeaderError

from spotify_dl.models.metadata import Tags

log = logging.getLogger(__name__)

# --- Constants ---
FLAC_MAX_BLOCKSIZE = 16777215  # ~16.7MB, max size for a FLAC metadata block
FRONT_COVER = 3
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

SUPPORTED_EXTENSIONS = (".flac", ".mp3")


def cover_mime_type(data: bytes) -> str:
    """Sniffs the MIME type of cover art; Spotify serves JPEG unless it is a PNG."""
    return "image/png" if data.startswith(PNG_SIGNATURE) else "image/jpeg"


class Tagger:
    """Writes metadata tags to MP3 and FLAC files."""

    def __init__(self, embed_cover: bool = True):
        self.embed_cover = embed_cover

    def tag_file(self, file_path: str, tags: Tags) -> bool:
        ext = os.path.splitext(file_path)[1].lower()
        if ext not in SUPPORTED_EXTENSIONS:
            log.error(f"Cannot tag '{os.path.basename(file_path)}': unsupported format")
            return False

        try:
            if ext == ".mp3":
                self._tag_mp3(file_path, tags)
            else:
                self._tag_flac(file_path, tags)
            return True
        except Exception as e:
            log.error(
                f"Failed to tag file '{os.path.basename(file_path)}': {e}",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            return False

    def _cover(self, tags: Tags) -> Optional[bytes]:
        if self.embed_cover and tags.album_cover:
            return tags.album_cover
        return None

    def _tag_flac(self, path: str, tags: Tags):
        audio = FLAC(path)
        audio["TITLE"] = [tags.title]
        audio["ALBUM"] = [tags.album_title]
        if tags.artists:
            audio["ARTIST"] = list(tags.artists)

        if cover := self._cover(tags):
            self._embed_flac_cover(audio, cover)

        audio.save()

    def _tag_mp3(self, path: str, tags: Tags):
        try:
            audio = id3.ID3(path)
        except ID3NoHeaderError:
            audio = id3.ID3()

        audio.add(id3.TIT2(encoding=3, text=tags.title))
        audio.add(id3.TALB(encoding=3, text=tags.album_title))
        if tags.artists:
            audio.add(id3.TPE1(encoding=3, text=list(tags.artists)))

        if cover := self._cover(tags):
            self._embed_mp3_cover(audio, cover)

        audio.save(filename=path, v2_version=3)

    def _embed_flac_cover(self, audio: FLAC, data: bytes):
        if len(data) > FLAC_MAX_BLOCKSIZE:
            log.warning("Cover art is too large to embed in FLAC.")
            return

        pic = Picture()
        pic.type = FRONT_COVER
        pic.mime = cover_mime_type(data)
        pic.data = data

        audio.clear_pictures()
        audio.add_picture(pic)

    def _embed_mp3_cover(self, audio: id3.ID3, data: bytes):
        audio.delall("APIC")
        audio.add(
            id3.APIC(
                encoding=3,
                mime=cover_mime_type(data),
                type=FRONT_COVER,
                desc="Cover",
                data=data,
            )
        )
