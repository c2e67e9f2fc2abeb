import threading
from typing import Optional
from vbt.domain.models import EncodingJob

class UIState:
    """Thread-safe state shared between event handlers and the live display."""

    def __init__(self):
        self._lock = threading.RLock()

        # Counters
        self.skipped_count = 0
        self.repaired_count = 0
        self.encoded_count = 0
        self.failed_count = 0

        # Progress
        self.total_jobs = 0
        self.finished_jobs = 0
        self.current_job: Optional[EncodingJob] = None
        self.current_action = ""
        self.current_progress = 0.0

        self.finished = False

    @property
    def overall_fraction(self) -> float:
        with self._lock:
            if self.total_jobs == 0:
                return 0.0
            return self.finished_jobs / self.total_jobs

    def start_job(self, job: EncodingJob, position: int, total: int):
        with self._lock:
            self.current_job = job
            self.current_action = "Validating"
            self.current_progress = 0.0
            self.finished_jobs = position
            self.total_jobs = total

    def set_action(self, action: str, progress: Optional[float] = None):
        with self._lock:
            self.current_action = action
            if progress is not None:
                self.current_progress = progress

    def add_skipped_job(self, job: EncodingJob):
        with self._lock:
            self.skipped_count += 1
            self.finish_job(job)

    def add_repaired_job(self, job: EncodingJob):
        with self._lock:
            self.repaired_count += 1
            self.finish_job(job)

    def add_encoded_job(self, job: EncodingJob):
        with self._lock:
            self.encoded_count += 1
            self.finish_job(job)

    def add_failed_job(self, job: EncodingJob):
        with self._lock:
            self.failed_count += 1
            self.finish_job(job)

    def mark_finished(self):
        with self._lock:
            self.finished = True

    def finish_job(self, job: EncodingJob):
        with self._lock:
            self.finished_jobs += 1
            if self.current_job is job:
                self.current_job = None
                self.current_action = ""
                self.current_progress = 0.0
