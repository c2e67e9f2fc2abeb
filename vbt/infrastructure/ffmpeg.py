import subprocess
import re
import logging
import time
from typing import List, Optional
from vbt.domain.models import EncodingJob
from vbt.config.models import AppConfig
from vbt.infrastructure.event_bus import EventBus
from vbt.domain.events import JobProgressUpdated

# 'time=00:01:02.50' in ffmpeg's stats line
TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")

class FFmpegAdapter:
    """Wrapper around ffmpeg for transcoding one job."""

    def __init__(self, event_bus: Optional[EventBus] = None, binary: str = "ffmpeg"):
        self.event_bus = event_bus
        self.binary = binary
        self.logger = logging.getLogger(__name__)

    def build_command(self, job: EncodingJob, config: AppConfig) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        cmd = [
            self.binary,
            "-y",  # Overwrite output files
            "-i", str(job.source.path),
            "-map", "0",
            "-map_metadata", "0",
            "-c:v", config.video.codec,
            "-preset", config.video.preset,
            "-crf", str(config.video.crf),
        ]

        cmd.extend(job.audio_plan.to_ffmpeg_args())

        if config.subtitles.copy_streams:
            cmd.extend(["-c:s", "copy"])

        cmd.extend(["-movflags", "+faststart"])
        cmd.append(str(job.output_path))
        return cmd

    def _publish_progress(self, job: EncodingJob, line: str):
        if not self.event_bus or job.source.duration_seconds <= 0:
            return
        match = TIME_PATTERN.search(line)
        if not match:
            return
        h, m, s = match.groups()
        current_seconds = int(h) * 3600 + int(m) * 60 + float(s)
        percent = min(100.0, 100.0 * current_seconds / job.source.duration_seconds)
        self.event_bus.publish(JobProgressUpdated(job=job, progress_percent=percent))

    def encode(self, job: EncodingJob, config: AppConfig) -> bool:
        """Runs ffmpeg to completion. Returns False and sets job.error_message on failure."""
        filename = job.source.path.name
        cmd = self.build_command(job, config)
        start_time = time.monotonic()
        self.logger.info(f"FFMPEG_START: {filename} ({config.video.codec} crf={config.video.crf}, audio={job.audio_plan.bitrates})")
        self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                universal_newlines=True,
                bufsize=1
            )
        except OSError as e:
            job.error_message = f"ffmpeg could not be started: {e}"
            self.logger.error(f"FFMPEG_END: {filename} status=not_started ({e})")
            return False

        tail: List[str] = []
        # ffmpeg rewrites its stats line with '\r'; universal newlines splits those too
        for line in process.stdout:
            self._publish_progress(job, line)
            tail.append(line.rstrip())
            del tail[:-20]

        process.wait()
        elapsed = time.monotonic() - start_time

        if process.returncode != 0:
            job.error_message = f"ffmpeg exited with code {process.returncode}"
            self.logger.error(f"FFMPEG_END: {filename} status=failed code={process.returncode} elapsed={elapsed:.2f}s")
            for line in tail:
                self.logger.debug(f"ffmpeg: {line}")
            return False

        self.logger.info(f"FFMPEG_END: {filename} status=completed elapsed={elapsed:.2f}s")
        return True
