import os
import pytest
from pathlib import Path
from typing import Dict, List, Optional
from vbt.config.models import AppConfig
from vbt.domain.models import EncodingJob, ProbeResult
from vbt.infrastructure.file_times import copy_file_times

INPUT_MTIME = 1_700_000_000


class FakeProbe:
    """Stands in for FFprobeAdapter: answers from a path -> ProbeResult table."""

    def __init__(self):
        self.results: Dict[Path, ProbeResult] = {}
        self.calls: List[Path] = []

    def set(self, path: Path, duration: int, channels: List[int]):
        self.results[Path(path).resolve()] = ProbeResult(duration_seconds=duration, audio_channels=channels)

    def probe(self, path: Path) -> ProbeResult:
        self.calls.append(Path(path))
        return self.results.get(Path(path).resolve(), ProbeResult())


class FakeEncoder:
    """Writes an output and registers how it will probe, like ffmpeg would."""

    def __init__(self, probe: FakeProbe):
        self.probe = probe
        self.encoded: List[Path] = []
        # input name -> (duration, channels) override for a broken output
        self.broken_outputs: Dict[str, tuple] = {}
        self.failing_inputs: set = set()

    def encode(self, job: EncodingJob, config: AppConfig) -> bool:
        self.encoded.append(job.source.path)
        if job.source.path.name in self.failing_inputs:
            job.error_message = "ffmpeg exited with code 1"
            return False
        job.output_path.write_bytes(b"encoded" * 10)
        if job.source.path.name in self.broken_outputs:
            duration, channels = self.broken_outputs[job.source.path.name]
        else:
            duration, channels = job.source.duration_seconds, list(job.source.audio_channels)
        self.probe.set(job.output_path, duration, channels)
        return True


class FakeMetadata:
    """Copies the filesystem timestamps like the exiftool + touch -r step."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.calls: List[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def sync_metadata(self, source: Path, target: Path) -> bool:
        self.calls.append((source, target))
        if self.enabled:
            copy_file_times(source, target)
        return self.enabled


def make_media(path: Path, size: int, mtime: int = INPUT_MTIME) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\0" * size)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest.fixture
def no_birthtime(monkeypatch):
    """Linux-like filesystems: no creation time on either side."""
    monkeypatch.setattr("vbt.pipeline.validator.get_birthtime", lambda path: None)


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def input_root(tmp_path):
    root = tmp_path / "videos"
    root.mkdir()
    return root
