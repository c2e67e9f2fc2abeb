from datetime import datetime, timedelta
from typing import Optional, Sequence
from vbt.domain.models import FileEstimate, Forecast

def estimate_seconds(duration: float, speed_factor: float) -> int:
    """Forecast encode time for one file, rounded to whole seconds."""
    if duration <= 0:
        return 0
    if speed_factor > 0:
        return int(round(duration / speed_factor))
    return int(round(duration))

def format_hms(seconds: float) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"

class EtaEstimator:
    """
    Turns source durations into per-file and cumulative forecasts.

    Pure: no I/O, no feedback from measured throughput. Estimates assume
    the files are processed sequentially in the order given.
    """

    def __init__(self, speed_factor: float):
        self.speed_factor = speed_factor

    def forecast(self, durations: Sequence[float], started_at: Optional[datetime] = None) -> Forecast:
        started_at = started_at or datetime.now()
        estimates = []
        cumulative = 0
        for duration in durations:
            estimate = estimate_seconds(duration, self.speed_factor)
            cumulative += estimate
            estimates.append(FileEstimate(
                duration_seconds=int(duration),
                estimated_seconds=estimate,
                cumulative_seconds=cumulative,
                done_by=started_at + timedelta(seconds=cumulative),
            ))
        return Forecast(
            estimates=estimates,
            total_seconds=cumulative,
            speed_factor=self.speed_factor,
            started_at=started_at,
        )
