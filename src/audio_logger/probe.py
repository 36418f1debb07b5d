"""Stream probing backends: the ffprobe binary or the mutagen library."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol

import mutagen

logger = logging.getLogger(__name__)

PROBE_BACKENDS = ("ffprobe", "mutagen")

DEFAULT_FFPROBE = "ffprobe"

# mutagen FileType class name -> ffprobe codec name
MUTAGEN_CODECS = {
    "MP3": "mp3",
    "EasyMP3": "mp3",
    "FLAC": "flac",
    "AAC": "aac",
    "OggVorbis": "vorbis",
    "OggOpus": "opus",
    "OggFLAC": "flac",
    "OggSpeex": "speex",
    "ASF": "wmav2",
}

# MP4 codec identifiers as reported by mutagen.mp4.MP4Info.codec
MP4_CODECS = {
    "mp4a.40.2": "aac",
    "mp4a.40.5": "aac",
    "mp4a.40.29": "aac",
    "mp4a.40.34": "mp3",
    "alac": "alac",
    "ac-3": "ac3",
    "ec-3": "eac3",
}


class ProbeError(Exception):
    """Raised when a file's streams cannot be read."""

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path
        self.message = message


class Prober(Protocol):
    """Anything that can describe the media streams of a file."""

    def probe(self, path: Path) -> list[dict]:
        """Return stream dicts with codec_type, codec_name, bit_rate, sample_rate."""
        ...


class FFprobeProber:
    """Probe files by shelling out to ffprobe and parsing its JSON output."""

    def __init__(self, binary: str = DEFAULT_FFPROBE):
        self.binary = binary

    def command(self, path: Path) -> list[str]:
        return [
            self.binary,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            str(path),
        ]

    def probe(self, path: Path) -> list[dict]:
        cmd = self.command(path)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", errors="replace")
        except OSError as e:
            raise ProbeError(path, f"could not run {self.binary}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.strip() or f"exit status {result.returncode}"
            raise ProbeError(path, stderr)

        try:
            info = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(path, f"invalid ffprobe output: {e}") from e

        return info.get("streams", [])


class MutagenProber:
    """Probe files in-process with mutagen's stream info."""

    def probe(self, path: Path) -> list[dict]:
        try:
            audio = mutagen.File(path)
        except (mutagen.MutagenError, OSError) as e:
            raise ProbeError(path, str(e)) from e

        if audio is None or audio.info is None:
            raise ProbeError(path, "unrecognized audio format")

        info = audio.info
        return [{
            "codec_type": "audio",
            "codec_name": self._codec_name(audio),
            "bit_rate": getattr(info, "bitrate", None) or None,
            "sample_rate": getattr(info, "sample_rate", None) or None,
        }]

    @staticmethod
    def _codec_name(audio) -> str:
        kind = type(audio).__name__
        if kind == "WAVE":
            return _pcm_codec(getattr(audio.info, "bits_per_sample", None))
        if kind in ("MP4", "EasyMP4"):
            codec = getattr(audio.info, "codec", "") or ""
            return MP4_CODECS.get(codec, codec or "aac")
        return MUTAGEN_CODECS.get(kind, kind.lower())


def _pcm_codec(bits: Optional[int]) -> str:
    """ffprobe-style name for little-endian PCM of a given sample width."""
    if not bits:
        return "pcm"
    if bits == 8:
        return "pcm_u8"
    return f"pcm_s{bits}le"


def get_prober(backend: str = "ffprobe", ffprobe_path: Optional[str] = None) -> Prober:
    """Create the prober for a backend name."""
    if backend == "ffprobe":
        return FFprobeProber(ffprobe_path or DEFAULT_FFPROBE)
    if backend == "mutagen":
        return MutagenProber()
    raise ValueError(f"Unknown probe backend: {backend!r} (expected one of {', '.join(PROBE_BACKENDS)})")
