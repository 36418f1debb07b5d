"""Scheduling of collection and extraction: lazy streaming or a bounded worker pool."""

import logging
from pathlib import Path
from queue import Empty, Queue
from threading import Lock, Thread
from typing import Iterator

from tqdm import tqdm

from .metadata import AudioMetadata, extract_metadata
from .probe import Prober
from .scanner import collect_audio_files, scan_music_directory

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 10


def stream_metadata(root: Path, prober: Prober) -> Iterator[AudioMetadata]:
    """
    Yield metadata for each audio file as soon as it has been probed.

    Directory listing and probing are interleaved, so only one record is in
    flight at a time. Files that fail to probe are skipped.
    """
    for path in scan_music_directory(root):
        metadata = extract_metadata(path, root, prober)
        if metadata is not None:
            yield metadata


def collect_metadata(
    root: Path,
    prober: Prober,
    workers: int = DEFAULT_WORKERS,
    progress: bool = False,
) -> list[AudioMetadata]:
    """
    Collect metadata for every audio file using a fixed pool of worker threads.

    The file list is gathered eagerly, then workers pop paths off a shared
    queue one at a time until it is empty. At most ``workers`` probes run at
    once.

    Args:
        root: Directory to scan
        prober: Backend used to read each file's streams
        workers: Number of worker threads
        progress: Show a tqdm progress bar on stderr

    Returns:
        Metadata records in collection order, failed files omitted

    Raises:
        The first unexpected exception a worker hit, after all workers stopped
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    audio_files = collect_audio_files(root, max_workers=workers)
    if not audio_files:
        return []

    pending: Queue[tuple[int, Path]] = Queue()
    for item in enumerate(audio_files):
        pending.put(item)

    results: dict[int, AudioMetadata] = {}
    results_lock = Lock()
    failed = 0
    errors: list[Exception] = []

    with tqdm(total=len(audio_files), desc="Probing", unit="file", disable=not progress) as pbar:

        def worker():
            nonlocal failed
            while not errors:
                try:
                    index, path = pending.get_nowait()
                except Empty:
                    return

                try:
                    metadata = extract_metadata(path, root, prober)
                except Exception as e:
                    # Handed back to the caller once every worker has stopped
                    with results_lock:
                        errors.append(e)
                    return

                with results_lock:
                    if metadata is None:
                        failed += 1
                    else:
                        results[index] = metadata
                    pbar.update(1)

        threads = [
            Thread(target=worker, name=f"probe-worker-{i}", daemon=True)
            for i in range(min(workers, len(audio_files)))
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    if errors:
        raise errors[0]

    logger.info(f"Probed {len(audio_files)} files: {len(results)} ok, {failed} failed")

    # Reassemble in original order
    return [results[i] for i in sorted(results)]

