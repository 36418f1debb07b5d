"""Track metadata - stream properties from a prober plus tags inferred from the path."""

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import NamedTuple, Optional

from .probe import Prober

logger = logging.getLogger(__name__)

UNKNOWN_CODEC = "Unknown"


class PathTags(NamedTuple):
    artist: Optional[str]
    album: Optional[str]
    title: str


@dataclass(frozen=True)
class AudioMetadata:
    """Metadata extracted from an audio file."""
    path: str
    title: str
    artist: Optional[str]
    album: Optional[str]
    extension: str
    codec_name: str
    bit_rate: Optional[float]     # kbps
    sample_rate: Optional[float]  # kHz

    def to_dict(self) -> dict:
        """Serializable form; absent optional fields are left out."""
        return {key: value for key, value in asdict(self).items() if value is not None}


def infer_path_tags(root: Path, path: Path) -> PathTags:
    """
    Infer artist, album and title from where a file sits under the scan root.

    The rule is relative to the file's depth, so ``root/Artist/Album/Track.mp3``
    gives all three whether the root is a library, artist or album folder.
    Components that do not exist (files less than three levels deep) are None.

    Args:
        root: Directory the scan started from
        path: Audio file under root

    Returns:
        PathTags(artist, album, title)
    """
    parts = Path(os.path.relpath(path, root)).parts
    title = os.path.splitext(parts[-1])[0]
    album = parts[-2] if len(parts) > 1 else None
    artist = parts[-3] if len(parts) > 2 else None
    return PathTags(artist=artist, album=album, title=title)


def _per_thousand(value) -> Optional[float]:
    """Convert a raw bits/s or Hz value to kbps/kHz, None if missing or not numeric."""
    if value is None:
        return None
    try:
        return float(value) / 1000
    except (TypeError, ValueError):
        # ffprobe reports "N/A" for some containers
        return None


def build_metadata(root: Path, path: Path, streams: list[dict]) -> AudioMetadata:
    """Assemble an AudioMetadata from probed streams and the file's location."""
    audio_stream = next(
        (s for s in streams if s.get("codec_type") == "audio"),
        {}
    )
    tags = infer_path_tags(root, path)

    return AudioMetadata(
        path=str(path),
        title=tags.title,
        artist=tags.artist,
        album=tags.album,
        extension=path.suffix.lower(),
        codec_name=audio_stream.get("codec_name") or UNKNOWN_CODEC,
        bit_rate=_per_thousand(audio_stream.get("bit_rate")),
        sample_rate=_per_thousand(audio_stream.get("sample_rate")),
    )


def extract_metadata(path: Path, root: Path, prober: Prober) -> Optional[AudioMetadata]:
    """
    Probe an audio file and build its metadata.

    Failures are logged once and the file is skipped.

    Args:
        path: Path to the audio file
        root: Directory the scan started from
        prober: Backend used to read the file's streams

    Returns:
        AudioMetadata, or None if the file could not be probed
    """
    try:
        streams = prober.probe(path)
        return build_metadata(root, path, streams)
    except Exception as e:
        logger.error(f"Error processing {path}: {e}")
        return None
