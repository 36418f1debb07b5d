"""Shared fixtures: fake probers and a small music library on disk."""

from pathlib import Path

import pytest

from audio_logger.probe import ProbeError

FLAC_STREAM = {
    "codec_type": "audio",
    "codec_name": "flac",
    "bit_rate": "912400",
    "sample_rate": "44100",
}

MP3_STREAM = {
    "codec_type": "audio",
    "codec_name": "mp3",
    "bit_rate": "320000",
    "sample_rate": "48000",
}


class FakeProber:
    """Returns canned streams by extension; raises for paths in ``broken``."""

    def __init__(self, broken=()):
        self.broken = {Path(p).name for p in broken}
        self.calls = []

    def probe(self, path: Path) -> list[dict]:
        self.calls.append(path)
        if path.name in self.broken:
            raise ProbeError(path, "Invalid data found when processing input")
        if path.suffix.lower() == ".flac":
            return [{"codec_type": "video", "codec_name": "mjpeg"}, dict(FLAC_STREAM)]
        return [dict(MP3_STREAM)]


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def music_library(tmp_path) -> Path:
    """
    music/
        Loose.MP3
        notes.txt
        Artist A/
            Album One/
                01 Intro.flac
                02 Song.mp3
                cover.jpg
            Album Two/
                Track.ogg
        Artist B/
            Single/
                Hit.wav
    """
    root = tmp_path / "music"
    files = [
        "Loose.MP3",
        "notes.txt",
        "Artist A/Album One/01 Intro.flac",
        "Artist A/Album One/02 Song.mp3",
        "Artist A/Album One/cover.jpg",
        "Artist A/Album Two/Track.ogg",
        "Artist B/Single/Hit.wav",
    ]
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x00")
    return root
