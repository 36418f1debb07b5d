"""Rendering of metadata records as pretty text blocks, JSON, or a log file."""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from .metadata import AudioMetadata

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "music_metadata.log"

ARTIST_PLACEHOLDER = "<artist>"
ALBUM_PLACEHOLDER = "<album>"
UNKNOWN_PLACEHOLDER = "<unknown>"


def _with_unit(value: Optional[float], unit: str) -> str:
    if value is None:
        return UNKNOWN_PLACEHOLDER
    return f"{value:.1f} {unit}"


def format_pretty(record: AudioMetadata) -> str:
    """
    Format a record as a multi-line block:

        Track (.flac)
        Artist - Album
        Codec: flac
        Bit Rate: 912.4 kbps
        Sample Rate: 44.1 kHz
    """
    return "\n".join([
        f"{record.title} ({record.extension})",
        f"{record.artist or ARTIST_PLACEHOLDER} - {record.album or ALBUM_PLACEHOLDER}",
        f"Codec: {record.codec_name}",
        f"Bit Rate: {_with_unit(record.bit_rate, 'kbps')}",
        f"Sample Rate: {_with_unit(record.sample_rate, 'kHz')}",
    ])


def format_pretty_log(records: Iterable[AudioMetadata]) -> str:
    """Join pretty blocks with a blank line between them."""
    blocks = [format_pretty(record) for record in records]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def format_json(records: Iterable[AudioMetadata]) -> str:
    """Serialize the full collection as an indented JSON array."""
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def write_log(records: Iterable[AudioMetadata], path: Path) -> int:
    """
    Write the pretty log file in one pass.

    All records are materialized before the file is opened, so a failure
    during collection never leaves a partial log behind.

    Returns:
        Number of records written
    """
    records = list(records)
    text = format_pretty_log(records)

    with open(path, "w", encoding="utf-8") as f:
        f.write(text)

    logger.info(f"Wrote {len(records)} records to {path}")
    return len(records)
