"""
Domain object factories for tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fieldcrm.domain.customers import Customer
from fieldcrm.domain.identity import Session, UserProfile
from fieldcrm.domain.job_management import Job, JobStatus, JobType
from fieldcrm.domain.ledger import MoneyLedger
from fieldcrm.domain.media import FolderPermissions


class FixedClock:
    """Controllable clock; ``advance`` moves it forward."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_job(
    job_id: str = "job-1",
    company_id: str = "acme",
    status: JobStatus = JobStatus.LEAD,
    completed_at: Optional[datetime] = None,
    ledger: Optional[MoneyLedger] = None,
    folder_permissions: Optional[FolderPermissions] = None,
    **overrides,
) -> Job:
    if status is JobStatus.COMPLETED and completed_at is None:
        completed_at = datetime(2024, 2, 1, tzinfo=timezone.utc)
    return Job(
        job_id=job_id,
        customer_id=overrides.pop("customer_id", "cust-1"),
        company_id=company_id,
        job_number=overrides.pop("job_number", "JOB-1700000000000"),
        status=status,
        completed_at=completed_at,
        job_type=overrides.pop("job_type", JobType.INSURANCE),
        ledger=ledger or MoneyLedger(),
        folder_permissions=folder_permissions or FolderPermissions.closed(),
        created_at=overrides.pop("created_at", 1700000000000),
        updated_at=overrides.pop("updated_at", 1700000000000),
        **overrides,
    )


def make_customer(
    customer_id: str = "cust-1",
    first_name: str = "Jane",
    last_name: str = "Doe",
    company_id: str = "acme",
    **overrides,
) -> Customer:
    return Customer(
        customer_id=customer_id,
        company_id=company_id,
        first_name=first_name,
        last_name=last_name,
        **overrides,
    )


def make_session(user_id: str = "user-1", company_id: str = "acme") -> Session:
    profile = UserProfile(
        user_id=user_id,
        email=f"{user_id}@example.com",
        first_name="Sam",
        last_name="Field",
        company_id=company_id,
    )
    return Session(user_id=user_id, profile=profile)
