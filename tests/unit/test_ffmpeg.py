import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock
from vbt.infrastructure.ffmpeg import FFmpegAdapter
from vbt.infrastructure.event_bus import EventBus
from vbt.domain.events import JobProgressUpdated
from vbt.domain.models import MediaFile, EncodingJob
from vbt.config.models import AppConfig
from vbt.pipeline.audio_plan import build_audio_plan

def make_job(channels=(2, 6), duration=10):
    mf = MediaFile(
        path=Path("input.mkv"), size_bytes=1000, duration_seconds=duration,
        audio_channels=list(channels), modified_time=0
    )
    return EncodingJob(source=mf, output_path=Path("out/input_out.mp4"), audio_plan=build_audio_plan(channels))

def test_ffmpeg_command_generation():
    config = AppConfig()
    cmd = FFmpegAdapter().build_command(make_job(), config)

    assert cmd[:4] == ["ffmpeg", "-y", "-i", "input.mkv"]
    assert cmd[cmd.index("-map") + 1] == "0"
    assert cmd[cmd.index("-map_metadata") + 1] == "0"
    assert cmd[cmd.index("-c:v") + 1] == "libx265"
    assert cmd[cmd.index("-preset") + 1] == "slow"
    assert cmd[cmd.index("-crf") + 1] == "28"
    assert cmd[cmd.index("-c:a:0") + 1] == "aac"
    assert cmd[cmd.index("-b:a:0") + 1] == "160k"
    assert cmd[cmd.index("-b:a:1") + 1] == "384k"
    assert cmd[cmd.index("-c:s") + 1] == "copy"
    assert cmd[cmd.index("-movflags") + 1] == "+faststart"
    assert cmd[-1] == str(Path("out/input_out.mp4"))

def test_ffmpeg_command_without_subtitles():
    config = AppConfig(subtitles={"copy": False})
    cmd = FFmpegAdapter().build_command(make_job(), config)
    assert "-c:s" not in cmd

def test_ffmpeg_command_without_audio_streams():
    cmd = FFmpegAdapter().build_command(make_job(channels=()), AppConfig())
    assert not any(c.startswith("-c:a") for c in cmd)

def test_ffmpeg_encode_success_publishes_progress():
    bus = EventBus()
    seen = []
    bus.subscribe(JobProgressUpdated, lambda e: seen.append(e.progress_percent))
    job = make_job(duration=10)

    with patch("subprocess.Popen") as mock_popen:
        process_instance = mock_popen.return_value
        process_instance.stdout = [
            "frame=  100 fps=10.0 q=28.0 size=100kB time=00:00:05.00 bitrate= 100.0kbits/s speed=1.3x",
            "frame=  200 fps=10.0 q=28.0 size=200kB time=00:00:10.00 bitrate= 100.0kbits/s speed=1.3x",
        ]
        process_instance.returncode = 0

        adapter = FFmpegAdapter(event_bus=bus)
        assert adapter.encode(job, AppConfig()) is True

    assert seen == [50.0, 100.0]
    assert job.error_message is None

def test_ffmpeg_encode_failure():
    job = make_job()
    with patch("subprocess.Popen") as mock_popen:
        process_instance = mock_popen.return_value
        process_instance.stdout = ["Error while opening encoder"]
        process_instance.returncode = 1

        adapter = FFmpegAdapter(event_bus=MagicMock())
        assert adapter.encode(job, AppConfig()) is False

    assert "ffmpeg exited with code 1" in job.error_message

def test_ffmpeg_missing_binary():
    job = make_job()
    with patch("subprocess.Popen", side_effect=FileNotFoundError("ffmpeg")):
        assert FFmpegAdapter().encode(job, AppConfig()) is False
    assert "could not be started" in job.error_message
