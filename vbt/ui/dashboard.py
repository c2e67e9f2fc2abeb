import threading
import time
from typing import Optional
from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text
from vbt.ui.state import UIState

class Dashboard:
    """Live progress display: whole batch on top, the current file below."""

    def __init__(self, state: UIState, console: Optional[Console] = None, bar_width: int = 40):
        self.state = state
        self.console = console or Console()
        self.bar_width = bar_width
        self._live: Optional[Live] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._stop_refresh = threading.Event()
        self._ui_lock = threading.Lock()

    def _bar_row(self, label: str, percent: float, caption: str) -> Table:
        grid = Table.grid(padding=(0, 1))
        grid.add_column(width=10)
        grid.add_column(width=self.bar_width)
        grid.add_column(justify="right", width=5)
        grid.add_column()
        grid.add_row(
            Text(label, style="dim"),
            ProgressBar(total=100.0, completed=percent, width=self.bar_width),
            f"{percent:3.0f}%",
            caption,
        )
        return grid

    def create_display(self) -> Group:
        with self.state._lock:
            overall = self.state.overall_fraction * 100
            done, total = self.state.finished_jobs, self.state.total_jobs
            job = self.state.current_job
            action = self.state.current_action
            progress = self.state.current_progress
            label = "Done" if self.state.finished else "Batch"
            counters = (
                f"[green]{self.state.encoded_count} encoded[/]  "
                f"[cyan]{self.state.skipped_count} skipped[/]  "
                f"[yellow]{self.state.repaired_count} repaired[/]  "
                f"[red]{self.state.failed_count} failed[/]"
            )

        rows = [self._bar_row(label, overall, f"{done}/{total}  {counters}")]
        if job is not None:
            rows.append(self._bar_row(action or "Working", progress, escape(job.source.path.name)))
        return Group(*rows)

    def _refresh_loop(self):
        """Background thread to update Live display."""
        while not self._stop_refresh.is_set():
            if self._live:
                display = self.create_display()
                with self._ui_lock:
                    self._live.update(display)
            time.sleep(0.5)

    def start(self):
        """Starts the Live display and refresh thread."""
        self._live = Live(self.create_display(), console=self.console, refresh_per_second=4, transient=True)
        self._live.start()
        self._stop_refresh.clear()
        self._refresh_thread = threading.Thread(target=self._refresh_loop, daemon=True)
        self._refresh_thread.start()
        return self

    def stop(self):
        """Stops the Live display and refresh thread."""
        self._stop_refresh.set()
        if self._refresh_thread:
            self._refresh_thread.join(timeout=1.0)
        if self._live:
            with self._ui_lock:
                self._live.update(self.create_display())
            self._live.stop()
            self._live = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
