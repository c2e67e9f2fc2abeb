import logging
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, List
from pydantic import BaseModel, Field
from vbt.config.models import AppConfig
from vbt.infrastructure.event_bus import EventBus
from vbt.infrastructure.exif_tool import ExifToolAdapter
from vbt.infrastructure.ffmpeg import FFmpegAdapter
from vbt.domain.models import BatchPlan, EncodingJob, JobStatus
from vbt.domain.events import (
    BatchFinished, JobCompleted, JobEncodeStarted, JobFailed,
    JobRepaired, JobRepairStarted, JobSkipped, JobStarted
)
from vbt.pipeline.validator import CompletenessValidator

logger = logging.getLogger(__name__)

class BatchResult(BaseModel):
    output_root: Path
    counts: Dict[JobStatus, int] = Field(default_factory=dict)
    failed_jobs: List[EncodingJob] = Field(default_factory=list)

    def count(self, status: JobStatus) -> int:
        return self.counts.get(status, 0)

class Orchestrator:
    """
    Drives each job of a BatchPlan through skip / repair / encode.

    Jobs run one at a time in plan order. Each job advances through an
    explicit transition table until it reaches a terminal JobStatus; a
    failure in one job never stops the batch.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        validator: CompletenessValidator,
        ffmpeg_adapter: FFmpegAdapter,
        exif_adapter: ExifToolAdapter
    ):
        self.config = config
        self.event_bus = event_bus
        self.validator = validator
        self.ffmpeg_adapter = ffmpeg_adapter
        self.exif_adapter = exif_adapter

        self._transitions: Dict[JobStatus, Callable[[EncodingJob], JobStatus]] = {
            JobStatus.PENDING: self._advance_pending,
            JobStatus.NEEDS_ENCODE: self._advance_needs_encode,
        }

    def _advance_pending(self, job: EncodingJob) -> JobStatus:
        if not job.output_path.exists():
            return JobStatus.NEEDS_ENCODE

        result = self.validator.check(job.source, job.output_path)
        if result.complete:
            return JobStatus.SKIPPED_COMPLETE

        # Often only the metadata/timestamp step was interrupted: try that before re-encoding
        self.event_bus.publish(JobRepairStarted(job=job, validation=result))
        logger.info(f"Re-checking incomplete output: {job.output_path} ({result.failure.value})")
        self.exif_adapter.sync_metadata(job.source.path, job.output_path)

        result = self.validator.check(job.source, job.output_path)
        if result.complete:
            return JobStatus.REPAIRED_COMPLETE

        job.failure = result.failure
        logger.info(f"Re-encoding incomplete file: {job.output_path} ({result.failure.value})")
        return JobStatus.NEEDS_ENCODE

    def _advance_needs_encode(self, job: EncodingJob) -> JobStatus:
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.event_bus.publish(JobEncodeStarted(job=job))

        if not self.ffmpeg_adapter.encode(job, self.config):
            job.failure = None
            return JobStatus.VALIDATION_FAILED

        self.exif_adapter.sync_metadata(job.source.path, job.output_path)

        result = self.validator.check(job.source, job.output_path)
        if result.complete:
            job.failure = None
            return JobStatus.ENCODED

        job.failure = result.failure
        job.error_message = f"failed validation ({result.failure.value}: {result.detail})"
        return JobStatus.VALIDATION_FAILED

    def process_job(self, job: EncodingJob) -> JobStatus:
        """Advances one job to a terminal status and publishes the outcome."""
        while not job.status.is_terminal:
            advance = self._transitions[job.status]
            try:
                job.status = advance(job)
            except Exception as e:
                logger.exception(f"Exception processing {job.source.path.name}: {e}")
                job.status = JobStatus.VALIDATION_FAILED
                job.error_message = f"Exception: {e}"

        self._publish_outcome(job)
        return job.status

    def _publish_outcome(self, job: EncodingJob):
        name = job.source.path.name
        if job.status == JobStatus.SKIPPED_COMPLETE:
            logger.info(f"Skipping complete: {job.output_path}")
            self.event_bus.publish(JobSkipped(job=job))
        elif job.status == JobStatus.REPAIRED_COMPLETE:
            logger.info(f"Fixed metadata/timestamps: {job.output_path}")
            self.event_bus.publish(JobRepaired(job=job))
        elif job.status == JobStatus.ENCODED:
            logger.info(f"Completed: {name} -> {job.output_path}")
            self.event_bus.publish(JobCompleted(job=job))
        else:
            message = job.error_message or "failed validation"
            logger.error(f"Failed: {name}: {message}")
            self.event_bus.publish(JobFailed(job=job, error_message=message))

    def run(self, plan: BatchPlan) -> BatchResult:
        total = len(plan.jobs)
        counts: Counter = Counter()
        failed: List[EncodingJob] = []

        for position, job in enumerate(plan.jobs):
            self.event_bus.publish(JobStarted(job=job, position=position, total=total))
            status = self.process_job(job)
            counts[status] += 1
            if status == JobStatus.VALIDATION_FAILED:
                failed.append(job)

        logger.info(
            f"Batch finished: skipped={counts[JobStatus.SKIPPED_COMPLETE]} "
            f"repaired={counts[JobStatus.REPAIRED_COMPLETE]} encoded={counts[JobStatus.ENCODED]} "
            f"failed={counts[JobStatus.VALIDATION_FAILED]}"
        )
        self.event_bus.publish(BatchFinished(
            output_root=plan.output_root,
            skipped=counts[JobStatus.SKIPPED_COMPLETE],
            repaired=counts[JobStatus.REPAIRED_COMPLETE],
            encoded=counts[JobStatus.ENCODED],
            failed=counts[JobStatus.VALIDATION_FAILED],
        ))
        return BatchResult(output_root=plan.output_root, counts=dict(counts), failed_jobs=failed)
