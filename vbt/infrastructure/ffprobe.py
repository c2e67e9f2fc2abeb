import subprocess
import json
import logging
from pathlib import Path
from typing import Any, Dict, List
from vbt.domain.models import ProbeResult

logger = logging.getLogger(__name__)

class FFprobeAdapter:
    """Wrapper around ffprobe to read duration and the audio stream layout."""

    def __init__(self, binary: str = "ffprobe"):
        self.binary = binary

    def _build_command(self, file_path: Path) -> List[str]:
        return [
            self.binary,
            "-v", "error",
            "-print_format", "json",
            "-show_entries", "format=duration:stream=index,codec_type,channels",
            str(file_path)
        ]

    def probe(self, file_path: Path) -> ProbeResult:
        """
        Returns duration (whole seconds) and per-stream audio channel counts.
        Any failure is reported as ProbeResult(0, []) instead of raising.
        """
        try:
            result = subprocess.run(self._build_command(file_path), capture_output=True, text=True)
        except OSError as e:
            logger.warning(f"ffprobe could not be started for {file_path}: {e}")
            return ProbeResult()

        if result.returncode != 0:
            logger.warning(f"ffprobe failed for {file_path}: {result.stderr.strip()}")
            return ProbeResult()

        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable ffprobe output for {file_path}: {e}")
            return ProbeResult()

        return ProbeResult(
            duration_seconds=self._parse_duration(data),
            audio_channels=self._parse_audio_channels(data),
        )

    @staticmethod
    def _parse_duration(data: Dict[str, Any]) -> int:
        raw = data.get("format", {}).get("duration")
        if raw in (None, "", "N/A"):
            return 0
        try:
            seconds = float(raw)
        except (TypeError, ValueError):
            return 0
        return max(0, int(round(seconds)))

    @staticmethod
    def _parse_audio_channels(data: Dict[str, Any]) -> List[int]:
        audio = [s for s in data.get("streams", []) if s.get("codec_type") == "audio"]
        # Stream order decides the plan index, so keep ffprobe's index order
        audio.sort(key=lambda s: s.get("index", 0))
        channels = []
        for stream in audio:
            try:
                channels.append(max(0, int(stream.get("channels") or 0)))
            except (TypeError, ValueError):
                channels.append(0)
        return channels
