"""
Job list filtering.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .entities import Job
from .value_objects import JobStatus, JobType

_NON_DIGIT = re.compile(r"\D")


def digits_only(text: Optional[str]) -> str:
    return _NON_DIGIT.sub("", text or "")


@dataclass(frozen=True)
class JobFilter:
    """
    Free-text, status and job-type filter over a job list.

    The query matches customer name, address, alternate address, job name
    and job number case-insensitively, and the customer phone by digits.
    All given criteria must match.
    """

    query: str = ""
    status: Optional[JobStatus] = None
    job_type: Optional[JobType] = None

    @property
    def is_active(self) -> bool:
        return bool(self.query.strip()) or self.status is not None or self.job_type is not None

    @property
    def active_filter_count(self) -> int:
        """Number of status/type filters set (the query is not counted)."""
        return (self.status is not None) + (self.job_type is not None)

    def matches(self, job: Job) -> bool:
        if self.status is not None and job.status is not self.status:
            return False
        if self.job_type is not None and job.job_type is not self.job_type:
            return False
        return self._matches_query(job)

    def _matches_query(self, job: Job) -> bool:
        lowered = self.query.strip().lower()
        if not lowered:
            return True

        haystacks = (
            job.detail("customer_name"),
            job.detail("customer_address"),
            job.detail("customer_alternate_address"),
            job.detail("job_name"),
            job.job_number,
        )
        if any(lowered in (text or "").lower() for text in haystacks):
            return True

        numeric = digits_only(self.query)
        return bool(numeric) and numeric in digits_only(job.detail("customer_phone"))

    def apply(self, jobs: Iterable[Job]) -> List[Job]:
        """Matching jobs in their original order."""
        return [job for job in jobs if self.matches(job)]
