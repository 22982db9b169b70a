"""
Job Management Domain

Job snapshots, the status pipeline, and job list filtering.
"""

from .entities import COLLECTION, DETAIL_FIELDS, Job, changed_fields, generate_job_number
from .filters import JobFilter
from .services import STATUS_COLORS, StatusPipeline, status_color
from .value_objects import (
    InsuranceDetails,
    JobCosts,
    JobStatus,
    JobType,
    MoneyRecord,
    StatusTransition,
)

__all__ = [
    "Job",
    "COLLECTION",
    "DETAIL_FIELDS",
    "changed_fields",
    "generate_job_number",
    "JobFilter",
    "JobStatus",
    "JobType",
    "InsuranceDetails",
    "JobCosts",
    "MoneyRecord",
    "StatusTransition",
    "StatusPipeline",
    "STATUS_COLORS",
    "status_color",
]
