from rich.console import Console
from rich.markup import escape
from rich.table import Table
from vbt.config.models import AppConfig
from vbt.domain.models import BatchPlan
from vbt.pipeline.eta import format_hms

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

def format_gb(size: int) -> str:
    return f"{size / (1024 ** 3):.2f} GB"

def print_header(console: Console, input_root, output_root, config: AppConfig, speed_factor: float):
    general, video, audio = config.general, config.video, config.audio
    subs = "Subs copied" if config.subtitles.copy_streams else "Subs dropped"
    console.print()
    console.print(f"[yellow]Transcoding videos under:[/yellow] {escape(str(input_root))}")
    console.print(f"[yellow]Excluding:[/yellow] {escape(str(output_root))}")
    console.print(f"[yellow]Output:[/yellow] {escape(str(output_root))} (mirrors structure)")
    console.print(
        f"[yellow]Codec:[/yellow] {video.codec} CRF {video.crf} | Audio {audio.codec} per-stream | "
        f"{subs} | [yellow]Est. speed:[/yellow] {speed_factor}x"
    )
    console.print(
        f"[red]Existing *{escape(general.output_suffix)}.{general.output_container} skipped if complete.[/red]\n"
    )

def render_plan(plan: BatchPlan) -> Table:
    table = Table(title=f"Files found (with per-file ETA at {plan.speed_factor}x)", title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("File", overflow="fold")
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Duration", justify="right", no_wrap=True)
    table.add_column("Audio", justify="right")
    table.add_column("Est", justify="right", no_wrap=True)
    table.add_column("Done by", justify="right", no_wrap=True)

    for i, job in enumerate(plan.jobs, start=1):
        try:
            name = str(job.source.path.relative_to(plan.input_root))
        except ValueError:
            name = str(job.source.path)
        audio = "/".join(job.audio_plan.bitrates) or "-"
        duration = format_hms(job.source.duration_seconds) if job.source.duration_seconds else "[red]unknown[/red]"
        table.add_row(
            str(i),
            escape(name),
            format_gb(job.source.size_bytes),
            duration,
            audio,
            format_hms(job.estimated_seconds),
            job.done_by.strftime(TIMESTAMP_FORMAT) if job.done_by else "-",
        )
    return table

def print_plan(console: Console, plan: BatchPlan):
    console.print(render_plan(plan))
    console.print(
        f"\n[yellow]Total estimated processing time:[/yellow] [red]{format_hms(plan.total_estimated_seconds)}[/red]"
    )
    console.print(
        f"[yellow]Estimated batch completion time:[/yellow] [red]{plan.finishes_at.strftime(TIMESTAMP_FORMAT)}[/red]\n"
    )
