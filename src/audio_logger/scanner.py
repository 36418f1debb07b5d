"""Music file scanner - discovers audio files in a directory tree."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = {".mp3", ".flac", ".wav", ".m4a", ".aac", ".ogg", ".wma"}

DEFAULT_STAT_WORKERS = 10


def is_audio_file(name: str) -> bool:
    """Check a filename against the audio extension allow-list (case-insensitive)."""
    return os.path.splitext(name)[1].lower() in AUDIO_EXTENSIONS


def _check_root(root: Path):
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")

    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")


def _list_directory(directory: Path) -> list[os.DirEntry]:
    """List a directory sorted by name. OSError propagates to the caller."""
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def scan_music_directory(root: Path) -> Iterator[Path]:
    """
    Recursively scan a directory for audio files.

    Traversal is depth-first: a subdirectory is fully walked before the next
    sibling entry is visited. Siblings are visited in name order. Directory
    symlinks are not followed.

    Args:
        root: Root directory to scan

    Yields:
        Path objects for each audio file found
    """
    _check_root(root)

    logger.info(f"Scanning directory: {root}")

    # Stack of iterators over pending directory listings
    stack = [iter(_list_directory(root))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        if entry.is_dir(follow_symlinks=False):
            logger.debug(f"Entering {entry.path}")
            stack.append(iter(_list_directory(Path(entry.path))))
        elif entry.is_file() and is_audio_file(entry.name):
            yield Path(entry.path)


def _stat_entry(path: Path) -> tuple[bool, bool]:
    """Return (is_directory, is_file) for a path without following directory symlinks."""
    if path.is_symlink():
        return False, path.is_file()
    return path.is_dir(), path.is_file()


def collect_audio_files(root: Path, max_workers: int = DEFAULT_STAT_WORKERS) -> list[Path]:
    """
    Eagerly collect every audio file under a directory.

    Each directory's entries are stat-ed concurrently, then reassembled in
    listing order, so the result matches ``list(scan_music_directory(root))``.

    Args:
        root: Root directory to scan
        max_workers: Threads used for the per-directory stat calls

    Returns:
        List of audio file paths in depth-first order
    """
    _check_root(root)

    logger.info(f"Collecting audio files under: {root}")

    found = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        stack = [iter(_stat_directory(executor, root))]
        while stack:
            item = next(stack[-1], None)
            if item is None:
                stack.pop()
                continue

            path, (is_dir, is_file) = item
            if is_dir:
                stack.append(iter(_stat_directory(executor, path)))
            elif is_file and is_audio_file(path.name):
                found.append(path)

    logger.info(f"Found {len(found)} audio files")
    return found


def _stat_directory(executor: ThreadPoolExecutor, directory: Path) -> list[tuple[Path, tuple[bool, bool]]]:
    """List a directory and stat all of its entries in parallel."""
    paths = [Path(entry.path) for entry in _list_directory(directory)]
    # executor.map keeps input order regardless of completion order
    return list(zip(paths, executor.map(_stat_entry, paths)))

