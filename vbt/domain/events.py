from pathlib import Path
from pydantic import BaseModel
from .models import EncodingJob, ValidationResult

class Event(BaseModel):
    """Base class for all domain events."""
    pass

class JobEvent(Event):
    job: EncodingJob

class JobStarted(JobEvent):
    position: int
    total: int

class JobSkipped(JobEvent):
    pass

class JobRepairStarted(JobEvent):
    validation: ValidationResult

class JobRepaired(JobEvent):
    pass

class JobEncodeStarted(JobEvent):
    pass

class JobProgressUpdated(JobEvent):
    progress_percent: float

class JobCompleted(JobEvent):
    pass

class JobFailed(JobEvent):
    error_message: str

class BatchFinished(Event):
    output_root: Path
    skipped: int = 0
    repaired: int = 0
    encoded: int = 0
    failed: int = 0
