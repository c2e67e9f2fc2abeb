import pytest
from datetime import datetime, timedelta
from pathlib import Path
from conftest import make_media
from vbt.config.models import AppConfig
from vbt.domain.errors import NoMediaFilesFound
from vbt.infrastructure.file_scanner import FileScanner
from vbt.pipeline.planner import BatchPlanner

NOW = datetime(2024, 6, 1, 8, 0, 0)
MB = 1024 * 1024

def make_planner(config, fake_probe):
    scanner = FileScanner(config.general.extensions, [config.general.output_dir_name])
    return BatchPlanner(config, scanner, fake_probe)

def test_output_path_mirrors_relative_directory(input_root, config, fake_probe):
    planner = make_planner(config, fake_probe)
    out = planner.output_path_for(input_root, input_root / "2023" / "trip" / "clip.MOV")
    assert out == input_root / "completed_transcribing" / "2023" / "trip" / "clip_out.mp4"

def test_output_path_custom_suffix_and_container(input_root, fake_probe):
    config = AppConfig(general={"output_suffix": ".hevc", "output_container": "mkv", "output_dir_name": "done"})
    planner = make_planner(config, fake_probe)
    assert planner.output_path_for(input_root, input_root / "a.avi") == input_root / "done" / "a.hevc.mkv"

def test_plan_orders_by_size_smallest_first(input_root, config, fake_probe):
    # Sizes scaled down from 500MB / 50MB / 2GB, same ordering
    big = make_media(input_root / "a_big.mkv", 2000)
    small = make_media(input_root / "b_small.mp4", 50)
    medium = make_media(input_root / "sub" / "c_medium.mov", 500)
    for path, duration in [(big, 7200), (small, 60), (medium, 600)]:
        fake_probe.set(path, duration, [2])

    plan = make_planner(config, fake_probe).build(input_root, speed_factor=2.0, now=NOW)

    assert [j.source.path.name for j in plan.jobs] == ["b_small.mp4", "c_medium.mov", "a_big.mkv"]
    assert [j.estimated_seconds for j in plan.jobs] == [30, 300, 3600]
    assert [j.cumulative_seconds for j in plan.jobs] == [30, 330, 3930]
    assert plan.jobs[-1].done_by == NOW + timedelta(seconds=3930)
    assert plan.total_estimated_seconds == 3930
    assert plan.speed_factor == 2.0
    assert plan.total_size_bytes == 2550
    assert plan.output_root == input_root.resolve() / "completed_transcribing"

def test_plan_snapshot_and_audio_plan(input_root, config, fake_probe):
    src = make_media(input_root / "concert.mkv", 100, mtime=1_650_000_000)
    fake_probe.set(src, 5400, [2, 6, 1])

    job = make_planner(config, fake_probe).build(input_root, now=NOW).jobs[0]

    assert job.source.duration_seconds == 5400
    assert job.source.audio_channels == [2, 6, 1]
    assert job.source.size_bytes == 100
    assert job.source.modified_time == 1_650_000_000
    assert job.audio_plan.bitrates == ["160k", "384k", "96k"]
    assert job.estimated_seconds == 4000  # 5400 / 1.35

def test_plan_excludes_existing_outputs(input_root, config, fake_probe):
    make_media(input_root / "a.mp4", 10)
    make_media(input_root / "completed_transcribing" / "a_out.mp4", 10)
    plan = make_planner(config, fake_probe).build(input_root, now=NOW)
    assert [j.source.path.name for j in plan.jobs] == ["a.mp4"]

def test_unprobeable_file_is_still_planned(input_root, config, fake_probe):
    make_media(input_root / "corrupt.avi", 10)
    job = make_planner(config, fake_probe).build(input_root, now=NOW).jobs[0]
    assert job.source.duration_seconds == 0
    assert job.source.audio_channels == []
    assert job.estimated_seconds == 0

def test_no_files_raises(input_root, config, fake_probe):
    (input_root / "readme.txt").write_text("nothing here")
    with pytest.raises(NoMediaFilesFound):
        make_planner(config, fake_probe).build(input_root, now=NOW)

def test_symlinked_inputs_keep_their_own_output_directory(tmp_path, input_root, config, fake_probe):
    target = make_media(tmp_path / "elsewhere" / "ep.mp4", 10)
    for season in ("season1", "season2"):
        (input_root / season).mkdir()
        (input_root / season / "ep.mp4").symlink_to(target)

    plan = make_planner(config, fake_probe).build(input_root, now=NOW)

    root = input_root.resolve()
    assert [j.source.path for j in plan.jobs] == [root / "season1" / "ep.mp4", root / "season2" / "ep.mp4"]
    assert [j.output_path for j in plan.jobs] == [
        root / "completed_transcribing" / "season1" / "ep_out.mp4",
        root / "completed_transcribing" / "season2" / "ep_out.mp4",
    ]
