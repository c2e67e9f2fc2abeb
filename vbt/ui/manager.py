from rich.console import Console
from rich.markup import escape
from vbt.infrastructure.event_bus import EventBus
from vbt.ui.state import UIState
from vbt.domain.events import (
    BatchFinished, JobCompleted, JobEncodeStarted, JobFailed, JobProgressUpdated,
    JobRepaired, JobRepairStarted, JobSkipped, JobStarted
)

class UIManager:
    """Subscribes to EventBus, updates UIState and prints one line per job outcome."""

    def __init__(self, bus: EventBus, state: UIState, console: Console):
        self.bus = bus
        self.state = state
        self.console = console
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobSkipped, self.on_job_skipped)
        self.bus.subscribe(JobRepairStarted, self.on_repair_started)
        self.bus.subscribe(JobRepaired, self.on_job_repaired)
        self.bus.subscribe(JobEncodeStarted, self.on_encode_started)
        self.bus.subscribe(JobProgressUpdated, self.on_job_progress)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)
        self.bus.subscribe(BatchFinished, self.on_batch_finished)

    def on_job_started(self, event: JobStarted):
        self.state.start_job(event.job, event.position, event.total)

    def on_job_skipped(self, event: JobSkipped):
        self.state.add_skipped_job(event.job)
        self.console.print(f"[green]Skipping complete:[/green] {escape(str(event.job.output_path))}")

    def on_repair_started(self, event: JobRepairStarted):
        self.state.set_action("Repairing metadata")
        reason = event.validation.failure.value if event.validation.failure else "unknown"
        self.console.print(
            f"[yellow]Re-checking incomplete output:[/yellow] {escape(str(event.job.output_path))} [dim]({reason})[/dim]"
        )

    def on_job_repaired(self, event: JobRepaired):
        self.state.add_repaired_job(event.job)
        self.console.print(f"[green]Fixed metadata/timestamps:[/green] {escape(str(event.job.output_path))}")

    def on_encode_started(self, event: JobEncodeStarted):
        self.state.set_action("Encoding", progress=0.0)
        if event.job.output_path.exists():
            self.console.print("[red]Re-encoding incomplete file...[/red]")
        self.console.print(f"[yellow]Processing:[/yellow] {escape(str(event.job.source.path))}")

    def on_job_progress(self, event: JobProgressUpdated):
        self.state.set_action("Encoding", progress=event.progress_percent)

    def on_job_completed(self, event: JobCompleted):
        self.state.add_encoded_job(event.job)
        self.console.print(f"[green]✓ Completed:[/green] {escape(str(event.job.output_path))}\n")

    def on_job_failed(self, event: JobFailed):
        self.state.add_failed_job(event.job)
        self.console.print(
            f"[red]⚠ WARNING:[/red] {escape(str(event.job.output_path))} failed validation. "
            f"[dim]{escape(event.error_message)}[/dim]\n"
        )

    def on_batch_finished(self, event: BatchFinished):
        self.state.mark_finished()
