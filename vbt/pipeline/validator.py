import logging
from pathlib import Path
from typing import Union
from vbt.domain.models import MediaFile, ValidationFailure, ValidationResult
from vbt.infrastructure.ffprobe import FFprobeAdapter
from vbt.infrastructure.file_times import get_birthtime, get_mtime

logger = logging.getLogger(__name__)

def duration_tolerance(input_duration: int) -> int:
    """About 0.5% of the input duration, never below one second."""
    return max(1, input_duration // 200)

class CompletenessValidator:
    """
    Decides whether an output is a finished transcode of its input.

    Everything is re-derived from the filesystem on each call: both files are
    re-probed and re-stat'ed, so the verdict can never come from stale state.
    Checks run in order and the first failing one is reported.
    """

    def __init__(self, ffprobe_adapter: FFprobeAdapter):
        self.ffprobe_adapter = ffprobe_adapter

    def check(self, source: Union[MediaFile, Path], output: Path) -> ValidationResult:
        input_path = source.path if isinstance(source, MediaFile) else Path(source)
        result = self._check(input_path, Path(output))
        if not result.complete:
            logger.debug(f"Incomplete: {output} [{result.failure.value}] {result.detail}")
        return result

    def is_complete(self, source: Union[MediaFile, Path], output: Path) -> bool:
        return self.check(source, output).complete

    def _check(self, input_path: Path, output: Path) -> ValidationResult:
        if not output.exists():
            return ValidationResult(failure=ValidationFailure.MISSING_OUTPUT, detail="output does not exist")
        if output.stat().st_size == 0:
            return ValidationResult(failure=ValidationFailure.EMPTY_OUTPUT, detail="output is empty")

        probe_in = self.ffprobe_adapter.probe(input_path)
        probe_out = self.ffprobe_adapter.probe(output)
        din, dout = probe_in.duration_seconds, probe_out.duration_seconds
        if din <= 0 or dout <= 0:
            return ValidationResult(
                failure=ValidationFailure.UNKNOWN_DURATION,
                detail=f"input={din}s output={dout}s"
            )

        tolerance = duration_tolerance(din)
        if abs(dout - din) > tolerance:
            return ValidationResult(
                failure=ValidationFailure.DURATION_DRIFT,
                detail=f"input={din}s output={dout}s tolerance={tolerance}s"
            )

        ch_in, ch_out = probe_in.audio_channels, probe_out.audio_channels
        if len(ch_in) != len(ch_out):
            return ValidationResult(
                failure=ValidationFailure.AUDIO_STREAM_COUNT,
                detail=f"input={len(ch_in)} output={len(ch_out)} audio streams"
            )
        for index, (a, b) in enumerate(zip(ch_in, ch_out)):
            if a != b:
                return ValidationResult(
                    failure=ValidationFailure.AUDIO_CHANNEL_ORDER,
                    detail=f"stream {index}: input={a}ch output={b}ch"
                )

        mt_in, mt_out = get_mtime(input_path), get_mtime(output)
        if mt_in != mt_out:
            return ValidationResult(
                failure=ValidationFailure.MODIFY_TIME,
                detail=f"input={mt_in} output={mt_out}"
            )

        # Only compared when both sides expose a creation time
        bt_in, bt_out = get_birthtime(input_path), get_birthtime(output)
        if bt_in is not None and bt_out is not None and bt_in != bt_out:
            return ValidationResult(
                failure=ValidationFailure.CREATE_TIME,
                detail=f"input={bt_in} output={bt_out}"
            )

        return ValidationResult()
