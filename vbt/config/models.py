from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

_BITRATE_PATTERN = r"^\d+[kKmM]?$"

class GeneralConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    speed_factor: float = 1.35
    extensions: List[str] = Field(
        default_factory=lambda: [".mp4", ".mkv", ".avi", ".mov", ".mts", ".m2ts", ".webm"]
    )
    output_dir_name: str = Field(default="completed_transcribing", min_length=1)
    output_suffix: str = "_out"
    output_container: str = Field(default="mp4", min_length=1)
    progress_bar_width: int = Field(default=40, gt=0)
    debug: bool = False

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        # Accept "mp4", ".mp4" and ".MP4" alike
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @field_validator('output_dir_name')
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"output_dir_name must be a plain directory name, got {v!r}")
        return v

class VideoConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    codec: str = "libx265"
    crf: int = Field(default=28, ge=0, le=51)
    preset: str = "slow"

class AudioConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    codec: str = "aac"
    mono_bitrate: str = Field(default="96k", pattern=_BITRATE_PATTERN)
    stereo_bitrate: str = Field(default="160k", pattern=_BITRATE_PATTERN)
    surround_bitrate: str = Field(default="384k", pattern=_BITRATE_PATTERN)

class SubtitleConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    copy_streams: bool = Field(default=True, alias="copy")

class ToolsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"
    exiftool: str = "exiftool"

class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    subtitles: SubtitleConfig = Field(default_factory=SubtitleConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
