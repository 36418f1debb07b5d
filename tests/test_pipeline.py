"""Tests for streaming and worker-pool metadata collection."""

import logging
import threading
import time

import pytest

from audio_logger.pipeline import collect_metadata, stream_metadata

from conftest import FakeProber


def titles(records):
    return [r.title for r in records]


class TestStreamMetadata:

    def test_yields_all_records_in_scan_order(self, music_library, prober):
        records = list(stream_metadata(music_library, prober))
        assert titles(records) == ["01 Intro", "02 Song", "Track", "Hit", "Loose"]

    def test_interleaves_scan_and_probe(self, music_library, prober):
        it = stream_metadata(music_library, prober)
        next(it)
        assert len(prober.calls) == 1

    def test_failure_skips_only_that_file(self, music_library, caplog):
        prober = FakeProber(broken=["02 Song.mp3"])

        with caplog.at_level(logging.ERROR):
            records = list(stream_metadata(music_library, prober))

        assert titles(records) == ["01 Intro", "Track", "Hit", "Loose"]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "02 Song.mp3" in errors[0].getMessage()

    def test_only_non_audio_files(self, tmp_path, prober):
        (tmp_path / "a.txt").write_bytes(b"")
        assert list(stream_metadata(tmp_path, prober)) == []
        assert prober.calls == []


class TestCollectMetadata:

    def test_matches_streaming_output(self, music_library, prober):
        assert collect_metadata(music_library, prober) == list(stream_metadata(music_library, FakeProber()))

    def test_every_file_probed_once(self, music_library, prober):
        collect_metadata(music_library, prober, workers=3)
        names = sorted(p.name for p in prober.calls)
        assert names == sorted(["01 Intro.flac", "02 Song.mp3", "Track.ogg", "Hit.wav", "Loose.MP3"])

    @pytest.mark.parametrize("workers", [1, 2, 10, 50])
    def test_result_order_independent_of_workers(self, music_library, workers):
        records = collect_metadata(music_library, FakeProber(), workers=workers)
        assert titles(records) == ["01 Intro", "02 Song", "Track", "Hit", "Loose"]

    def test_failures_dropped(self, music_library, caplog):
        prober = FakeProber(broken=["Hit.wav", "Loose.MP3"])

        with caplog.at_level(logging.ERROR):
            records = collect_metadata(music_library, prober, workers=4)

        assert titles(records) == ["01 Intro", "02 Song", "Track"]
        assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 2

    def test_concurrency_is_bounded(self, music_library):
        active = 0
        peak = 0
        lock = threading.Lock()

        class SlowProber(FakeProber):
            def probe(self, path):
                nonlocal active, peak
                with lock:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.02)
                with lock:
                    active -= 1
                return super().probe(path)

        collect_metadata(music_library, SlowProber(), workers=2)
        assert 1 <= peak <= 2

    def test_empty_tree(self, tmp_path, prober):
        assert collect_metadata(tmp_path, prober) == []

    def test_invalid_worker_count(self, music_library, prober):
        with pytest.raises(ValueError):
            collect_metadata(music_library, prober, workers=0)

    def test_deterministic(self, music_library):
        first = collect_metadata(music_library, FakeProber(), workers=5)
        second = collect_metadata(music_library, FakeProber(), workers=5)
        assert first == second

    def test_progress_bar(self, music_library, prober, capsys):
        collect_metadata(music_library, prober, progress=True)
        assert "Probing" in capsys.readouterr().err


class CorruptHeaderProber(FakeProber):
    """Raises a parser error instead of a ProbeError for one file."""

    def probe(self, path):
        if path.name == "Track.ogg":
            raise ValueError("corrupt header")
        return super().probe(path)


class TestUnexpectedErrors:

    def test_streaming_skips_parser_error(self, music_library, caplog):
        with caplog.at_level(logging.ERROR):
            records = list(stream_metadata(music_library, CorruptHeaderProber()))

        assert titles(records) == ["01 Intro", "02 Song", "Hit", "Loose"]
        assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 1

    def test_worker_pool_skips_parser_error(self, music_library, caplog):
        with caplog.at_level(logging.ERROR):
            records = collect_metadata(music_library, CorruptHeaderProber(), workers=2)

        assert titles(records) == ["01 Intro", "02 Song", "Hit", "Loose"]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "corrupt header" in errors[0].getMessage()

    @pytest.mark.parametrize("workers", [1, 3])
    def test_worker_exception_reaches_caller(self, music_library, prober, monkeypatch, workers):
        import audio_logger.pipeline as pipeline

        real_extract = pipeline.extract_metadata

        def exploding_extract(path, root, prober):
            if path.name == "Hit.wav":
                raise RuntimeError("extractor bug")
            return real_extract(path, root, prober)

        monkeypatch.setattr(pipeline, "extract_metadata", exploding_extract)

        with pytest.raises(RuntimeError, match="extractor bug"):
            collect_metadata(music_library, prober, workers=workers)
