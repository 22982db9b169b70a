"""
Job Management Entities

The job snapshot: one immutable, internally consistent view of a job's
persisted state.
"""

import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from ..ledger import MoneyLedger
from ..media import FolderPermissions, MediaLibrary
from .value_objects import InsuranceDetails, JobCosts, JobStatus, JobType

COLLECTION = "jobs"

# Descriptive fields callers may edit directly; everything else goes
# through a dedicated operation.
DETAIL_FIELDS = {
    "job_name": "jobName",
    "job_description": "jobDescription",
    "measurements": "measurements",
    "job_notes": "jobNotes",
    "customer_name": "customerName",
    "customer_phone": "customerPhone",
    "customer_address": "customerAddress",
    "customer_alternate_address": "customerAlternateAddress",
    "install_date": "installDate",
    "date_ordered": "dateOrdered",
    "delivery_date": "deliveryDate",
    "supply_store": "supplyStore",
    "original_order_details": "originalOrderDetails",
    "original_order_receipt_url": "originalOrderReceiptUrl",
}


def generate_job_number(now_ms: Optional[int] = None) -> str:
    """Human-readable job identifier, ``JOB-<epoch ms>``."""
    return f"JOB-{now_ms if now_ms is not None else int(time.time() * 1000)}"


def _parse_completed_at(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class Job:
    """
    Entity representing a job snapshot.

    ``job_id`` is the storage id; ``job_number`` is the identifier shown to
    people. Snapshots are never mutated: every change produces a new one
    via ``dataclasses.replace`` so ledger, status and media fields cannot
    drift apart mid-update.
    """

    job_id: str
    customer_id: str
    company_id: str
    job_number: str
    status: JobStatus = JobStatus.LEAD
    completed_at: Optional[datetime] = None
    job_type: JobType = JobType.INSURANCE
    trades: Tuple[str, ...] = ()
    assigned_user_ids: Tuple[str, ...] = ()
    ledger: MoneyLedger = field(default_factory=MoneyLedger)
    media: MediaLibrary = field(default_factory=MediaLibrary)
    folder_permissions: FolderPermissions = field(default_factory=FolderPermissions.closed)
    insurance: Optional[InsuranceDetails] = None
    costs: JobCosts = field(default_factory=JobCosts)
    details: Dict[str, str] = field(default_factory=dict)
    created_at: int = 0
    updated_at: int = 0
    is_deleted: bool = False

    def __post_init__(self):
        """Validate snapshot invariants."""
        if not self.job_id:
            raise ValueError("Job id is required")
        if (self.status is JobStatus.COMPLETED) != (self.completed_at is not None):
            raise ValueError(
                f"completed_at must be set exactly when status is Completed "
                f"(status={self.status.value}, completed_at={self.completed_at})"
            )
        unknown = set(self.details) - set(DETAIL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown detail fields: {sorted(unknown)}")

    def detail(self, name: str) -> str:
        return self.details.get(name, "")

    def with_details(self, **changes: str) -> "Job":
        """New snapshot with descriptive fields replaced."""
        details = dict(self.details)
        details.update({k: v or "" for k, v in changes.items()})
        return replace(self, details=details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted job record."""
        data = {
            "id": self.job_id,
            "customerId": self.customer_id,
            "companyId": self.company_id,
            "jobId": self.job_number,
            "assignedUserIds": list(self.assigned_user_ids),
            "status": self.status.value,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isDeleted": self.is_deleted,
            "jobType": self.job_type.value,
            "trades": list(self.trades),
            "media": self.media.to_dict(),
            "folderPermissions": self.folder_permissions.to_dict(),
        }
        data.update({key: self.detail(attr) for attr, key in DETAIL_FIELDS.items()})
        data.update(self.ledger.to_dict())
        data.update(self.costs.to_dict())
        data.update((self.insurance or InsuranceDetails()).to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """
        Create a Job from a persisted record.

        Records written before media was split by category carry a flat
        ``files`` array instead of a ``media`` map; both are accepted.
        """
        if data.get("media") is not None:
            media = MediaLibrary.from_dict(data["media"])
        else:
            media = MediaLibrary.from_records(data.get("files") or [])

        status = JobStatus.parse(data.get("status") or JobStatus.LEAD.value)
        completed_at = _parse_completed_at(data.get("completedAt"))
        if status is not JobStatus.COMPLETED:
            completed_at = None
        elif completed_at is None:
            # leads saved straight into Completed never recorded a timestamp
            fallback_ms = int(data.get("updatedAt") or data.get("createdAt") or 0)
            completed_at = datetime.fromtimestamp(fallback_ms / 1000, tz=timezone.utc)

        return cls(
            job_id=data["id"],
            customer_id=data.get("customerId", ""),
            company_id=data.get("companyId", ""),
            job_number=data.get("jobId", ""),
            status=status,
            completed_at=completed_at,
            job_type=JobType(data.get("jobType") or JobType.INSURANCE.value),
            trades=tuple(data.get("trades") or ()),
            assigned_user_ids=tuple(data.get("assignedUserIds") or ()),
            ledger=MoneyLedger.from_dict(data),
            media=media,
            folder_permissions=FolderPermissions.from_dict(data.get("folderPermissions") or {}),
            insurance=InsuranceDetails.from_dict(data),
            costs=JobCosts.from_dict(data),
            details={
                attr: data.get(key) or ""
                for attr, key in DETAIL_FIELDS.items()
                if data.get(key)
            },
            created_at=int(data.get("createdAt") or 0),
            updated_at=int(data.get("updatedAt") or 0),
            is_deleted=bool(data.get("isDeleted", False)),
        )


def changed_fields(before: Job, after: Job) -> Dict[str, Any]:
    """
    Top-level persisted fields that differ between two snapshots.

    Args:
        before: Snapshot currently persisted
        after: Proposed next snapshot

    Returns:
        Mapping of field name to new value, empty when nothing changed
    """
    old = before.to_dict()
    new = after.to_dict()
    return {key: value for key, value in new.items() if old.get(key) != value}
