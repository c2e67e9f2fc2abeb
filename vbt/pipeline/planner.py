import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from vbt.config.models import AppConfig
from vbt.domain.errors import NoMediaFilesFound
from vbt.domain.models import BatchPlan, EncodingJob, MediaFile
from vbt.infrastructure.ffprobe import FFprobeAdapter
from vbt.infrastructure.file_scanner import FileScanner
from vbt.infrastructure.file_times import get_birthtime, get_mtime
from vbt.pipeline.audio_plan import build_audio_plan
from vbt.pipeline.eta import EtaEstimator

logger = logging.getLogger(__name__)

def output_root_for(input_root: Path, config: AppConfig) -> Path:
    return input_root / config.general.output_dir_name

class BatchPlanner:
    """Discovers inputs and turns them into a size-ordered BatchPlan with ETAs."""

    def __init__(self, config: AppConfig, file_scanner: FileScanner, ffprobe_adapter: FFprobeAdapter):
        self.config = config
        self.file_scanner = file_scanner
        self.ffprobe_adapter = ffprobe_adapter

    def output_path_for(self, input_root: Path, path: Path) -> Path:
        """Mirrors the input's relative directory under the output root."""
        general = self.config.general
        try:
            rel_dir = path.parent.relative_to(input_root)
        except ValueError:
            rel_dir = Path()
        filename = f"{path.stem}{general.output_suffix}.{general.output_container}"
        return output_root_for(input_root, self.config) / rel_dir / filename

    def snapshot(self, path: Path) -> MediaFile:
        st = path.stat()
        probe = self.ffprobe_adapter.probe(path)
        return MediaFile(
            path=path.absolute(),
            size_bytes=st.st_size,
            duration_seconds=probe.duration_seconds,
            audio_channels=probe.audio_channels,
            modified_time=get_mtime(path),
            created_time=get_birthtime(path),
        )

    def discover(self, input_root: Path) -> List[MediaFile]:
        files = []
        for path in self.file_scanner.scan(input_root):
            try:
                files.append(self.snapshot(path))
            except OSError as e:
                logger.warning(f"Skipping {path}: {e}")
                continue
            logger.debug(f"Discovered {path} ({files[-1].size_bytes} bytes, {files[-1].duration_seconds}s)")
        return files

    def build(self, input_root: Path, speed_factor: Optional[float] = None, now: Optional[datetime] = None) -> BatchPlan:
        input_root = input_root.resolve()
        speed = self.config.general.speed_factor if speed_factor is None else speed_factor
        now = now or datetime.now()

        files = self.discover(input_root)
        if not files:
            raise NoMediaFilesFound(input_root)

        # Smallest first: cheap jobs surface tool/config errors early
        files.sort(key=lambda f: f.size_bytes)

        forecast = EtaEstimator(speed).forecast([f.duration_seconds for f in files], started_at=now)
        jobs = []
        for media_file, estimate in zip(files, forecast.estimates):
            jobs.append(EncodingJob(
                source=media_file,
                output_path=self.output_path_for(input_root, media_file.path),
                audio_plan=build_audio_plan(media_file.audio_channels, tiers=self.config.audio),
                estimated_seconds=estimate.estimated_seconds,
                cumulative_seconds=estimate.cumulative_seconds,
                done_by=estimate.done_by,
            ))

        logger.info(f"Plan: {len(jobs)} files, est. {forecast.total_seconds}s at {speed}x")
        return BatchPlan(
            jobs=jobs,
            total_estimated_seconds=forecast.total_seconds,
            speed_factor=speed,
            created_at=now,
            input_root=input_root,
            output_root=output_root_for(input_root, self.config),
        )
