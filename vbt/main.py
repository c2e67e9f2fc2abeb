import typer
from pathlib import Path
from typing import Optional
from rich.console import Console

from vbt.config.loader import load_config, ConfigError
from vbt.infrastructure.logging import setup_logging
from vbt.infrastructure.event_bus import EventBus
from vbt.infrastructure.file_scanner import FileScanner
from vbt.infrastructure.exif_tool import ExifToolAdapter
from vbt.infrastructure.ffprobe import FFprobeAdapter
from vbt.infrastructure.ffmpeg import FFmpegAdapter
from vbt.domain.errors import NoMediaFilesFound
from vbt.domain.models import JobStatus
from vbt.pipeline.orchestrator import Orchestrator
from vbt.pipeline.planner import BatchPlanner, output_root_for
from vbt.pipeline.validator import CompletenessValidator
from vbt.ui.state import UIState
from vbt.ui.manager import UIManager
from vbt.ui.dashboard import Dashboard
from vbt.ui.plan_view import print_header, print_plan

app = typer.Typer(help="VBT (Video Batch Transcode) - resumable H.265 batch transcoding")

@app.command()
def transcode(
    input_dir: Path = typer.Argument(Path("."), help="Directory tree to transcode (default: current directory)"),
    config_path: Optional[Path] = typer.Option(Path("conf/vbt.yaml"), "--config", "-c", help="Path to YAML config"),
    speed: Optional[float] = typer.Option(None, "--speed", help="Estimated speed factor (x real-time) for ETAs"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Start without waiting for confirmation"),
    plan_only: bool = typer.Option(False, "--plan-only", help="Show the plan and ETAs, then exit"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")
):
    """Transcode every video under INPUT_DIR, skipping outputs that are already complete."""
    console = Console()
    if not input_dir.is_dir():
        typer.secho(f"Error: Directory {input_dir} does not exist.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if debug:
        config.general.debug = True
    speed_factor = speed if speed is not None else config.general.speed_factor

    input_root = input_dir.resolve()
    output_root = output_root_for(input_root, config)
    logger = setup_logging(output_root, debug=config.general.debug)
    logger.info(f"VBT started: input={input_root}, output={output_root}")
    logger.info(
        f"Config: codec={config.video.codec} crf={config.video.crf} preset={config.video.preset} "
        f"audio={config.audio.codec} speed={speed_factor}"
    )

    print_header(console, input_root, output_root, config, speed_factor)

    ffprobe = FFprobeAdapter(binary=config.tools.ffprobe)
    scanner = FileScanner(
        extensions=config.general.extensions,
        excluded_dir_names=[config.general.output_dir_name]
    )
    planner = BatchPlanner(config, scanner, ffprobe)

    try:
        console.print("[blue]Scanning video files...[/blue]\n")
        try:
            plan = planner.build(input_root, speed_factor=speed_factor)
        except NoMediaFilesFound as e:
            logger.warning(str(e))
            console.print("[red]No video files found.[/red]")
            raise typer.Exit(code=1)

        print_plan(console, plan)
        if plan_only:
            raise typer.Exit(code=0)

        if not yes:
            try:
                console.input("Press Enter to start transcoding or Ctrl+C to abort")
            except EOFError:
                console.print("[red]No confirmation received, aborting.[/red]")
                raise typer.Exit(code=1)

        bus = EventBus()
        ui_state = UIState()
        UIManager(bus, ui_state, console)

        exif = ExifToolAdapter(executable=config.tools.exiftool)
        orchestrator = Orchestrator(
            config=config,
            event_bus=bus,
            validator=CompletenessValidator(ffprobe),
            ffmpeg_adapter=FFmpegAdapter(event_bus=bus, binary=config.tools.ffmpeg),
            exif_adapter=exif
        )

        with exif:
            logger.info("ExifTool started")
            with Dashboard(ui_state, console=console, bar_width=config.general.progress_bar_width):
                result = orchestrator.run(plan)

        failed = result.count(JobStatus.VALIDATION_FAILED)
        console.print(
            f"[green]{result.count(JobStatus.ENCODED)} encoded[/green], "
            f"[cyan]{result.count(JobStatus.SKIPPED_COMPLETE)} skipped[/cyan], "
            f"[yellow]{result.count(JobStatus.REPAIRED_COMPLETE)} repaired[/yellow], "
            f"[red]{failed} failed[/red]"
        )
        for job in result.failed_jobs:
            console.print(f"  [red]✗[/red] {job.source.path}: {job.error_message or 'failed validation'}")
        console.print(f"[green]All outputs written to:[/green] {output_root}")

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        typer.echo("\nInterrupted by user")
        raise typer.Exit(code=130)

    except typer.Exit:
        raise

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
