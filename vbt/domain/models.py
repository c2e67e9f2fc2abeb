from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class JobStatus(str, Enum):
    PENDING = "PENDING"
    SKIPPED_COMPLETE = "SKIPPED_COMPLETE"
    REPAIRED_COMPLETE = "REPAIRED_COMPLETE"
    NEEDS_ENCODE = "NEEDS_ENCODE"
    ENCODED = "ENCODED"
    VALIDATION_FAILED = "VALIDATION_FAILED"

    @property
    def is_terminal(self) -> bool:
        return self not in (JobStatus.PENDING, JobStatus.NEEDS_ENCODE)

class ValidationFailure(str, Enum):
    """First check that rejected an output, kept for diagnostics only."""
    MISSING_OUTPUT = "missing_output"
    EMPTY_OUTPUT = "empty_output"
    UNKNOWN_DURATION = "unknown_duration"
    DURATION_DRIFT = "duration_drift"
    AUDIO_STREAM_COUNT = "audio_stream_count"
    AUDIO_CHANNEL_ORDER = "audio_channel_order"
    MODIFY_TIME = "modify_time"
    CREATE_TIME = "create_time"

class ProbeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration_seconds: int = Field(default=0, ge=0)
    audio_channels: List[int] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.duration_seconds > 0

class ValidationResult(BaseModel):
    failure: Optional[ValidationFailure] = None
    detail: str = ""

    @property
    def complete(self) -> bool:
        return self.failure is None

class MediaFile(BaseModel):
    """Snapshot of a discovered input, taken once at discovery."""
    model_config = ConfigDict(frozen=True)

    path: Path
    size_bytes: int
    duration_seconds: int = 0
    audio_channels: List[int] = Field(default_factory=list)
    modified_time: int
    created_time: Optional[int] = None

class AudioStreamSettings(BaseModel):
    index: int
    codec: str
    bitrate: str
    channels: int

class AudioStreamPlan(BaseModel):
    streams: List[AudioStreamSettings] = Field(default_factory=list)

    @property
    def bitrates(self) -> List[str]:
        return [s.bitrate for s in self.streams]

    def to_ffmpeg_args(self) -> List[str]:
        args: List[str] = []
        for stream in self.streams:
            args.extend([
                f"-c:a:{stream.index}", stream.codec,
                f"-b:a:{stream.index}", stream.bitrate,
            ])
        return args

class EncodingJob(BaseModel):
    source: MediaFile
    output_path: Path
    status: JobStatus = JobStatus.PENDING
    audio_plan: AudioStreamPlan = Field(default_factory=AudioStreamPlan)
    estimated_seconds: int = 0
    cumulative_seconds: int = 0
    done_by: Optional[datetime] = None
    failure: Optional[ValidationFailure] = None
    error_message: Optional[str] = None

class FileEstimate(BaseModel):
    duration_seconds: int
    estimated_seconds: int
    cumulative_seconds: int
    done_by: datetime

class Forecast(BaseModel):
    estimates: List[FileEstimate] = Field(default_factory=list)
    total_seconds: int = 0
    speed_factor: float
    started_at: datetime

    @property
    def finishes_at(self) -> datetime:
        return self.started_at + timedelta(seconds=self.total_seconds)

class BatchPlan(BaseModel):
    jobs: List[EncodingJob] = Field(default_factory=list)
    total_estimated_seconds: int = 0
    speed_factor: float
    created_at: datetime
    input_root: Path
    output_root: Path

    @property
    def total_size_bytes(self) -> int:
        return sum(job.source.size_bytes for job in self.jobs)

    @property
    def finishes_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.total_estimated_seconds)
