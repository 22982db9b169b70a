"""
Job Management Services

Domain services for the job status pipeline.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union

from .value_objects import JobStatus, StatusTransition

STATUS_COLORS = {
    JobStatus.LEAD: "#1976d2",
    JobStatus.RETAIL: "#0288d1",
    JobStatus.INSPECTED: "#7b1fa2",
    JobStatus.CLAIM_FILED: "#f57c00",
    JobStatus.MET_WITH_ADJUSTER: "#e65100",
    JobStatus.PARTIAL_APPROVAL: "#fbc02d",
    JobStatus.FULL_APPROVAL: "#388e3c",
    JobStatus.PRODUCTION: "#6a1b9a",
    JobStatus.PENDING_PAYMENT: "#ff8f00",
    JobStatus.DELINQUENT_PAYMENT: "#c62828",
    JobStatus.COMPLETED: "#00838f",
}

FALLBACK_STATUS_COLOR = "#999"


def status_color(status: Union[JobStatus, str]) -> str:
    """Display colour for a status; unknown strings get the fallback colour."""
    if isinstance(status, str):
        try:
            status = JobStatus(status)
        except ValueError:
            return FALLBACK_STATUS_COLOR
    return STATUS_COLORS.get(status, FALLBACK_STATUS_COLOR)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusPipeline:
    """
    Domain service for job status transitions.

    Any status may move to any other status; offices correct statuses as
    often as they advance them. The only derived state is ``completed_at``,
    which is set on entering Completed and cleared on leaving it.
    """

    initial = JobStatus.LEAD

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        """
        Initialize the pipeline.

        Args:
            clock: Source of transition timestamps
        """
        self._clock = clock

    def transition(
        self,
        current: Union[JobStatus, str],
        target: Union[JobStatus, str],
        completed_at: Optional[datetime] = None,
    ) -> StatusTransition:
        """
        Move from ``current`` to ``target``.

        Args:
            current: Status the job is in now
            target: Requested status
            completed_at: The job's current completion timestamp

        Returns:
            StatusTransition with the new status and completion timestamp

        Raises:
            UnknownStatusError: If either status is not in the pipeline
        """
        current = JobStatus.parse(current)
        target = JobStatus.parse(target)

        if target is JobStatus.COMPLETED:
            if current is JobStatus.COMPLETED and completed_at is not None:
                return StatusTransition(target, completed_at, changed=False)
            return StatusTransition(target, self._clock(), changed=True)

        changed = current is not target or completed_at is not None
        return StatusTransition(target, None, changed=changed)

    def initial_completed_at(self, status: Union[JobStatus, str]) -> Optional[datetime]:
        """Completion timestamp for a record created directly in ``status``."""
        return self._clock() if JobStatus.parse(status) is JobStatus.COMPLETED else None
