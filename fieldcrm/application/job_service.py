"""
Job Application Service

Coordinates job lookup, live job lists, and job housekeeping.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, List, Optional

from fieldcrm.domain import customers as customer_domain
from fieldcrm.domain import job_management
from fieldcrm.domain.customers import Customer, search_customers
from fieldcrm.domain.document_store import DocumentQuery, DocumentStore
from fieldcrm.domain.errors import JobNotFoundError, PersistenceError
from fieldcrm.domain.identity import Session
from fieldcrm.domain.job_management import Job, JobFilter, StatusPipeline
from fieldcrm.domain.ledger import DEFAULT_OVERDUE_AFTER, FinancialHealth, assess_financial_health
from fieldcrm.domain.media import MediaPermissionModel

from .event_publisher import EventPublisher
from .job_aggregate import JobAggregate
from .operation_tracker import OperationTracker

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _company_query(collection: str, session: Session) -> DocumentQuery:
    return DocumentQuery(
        collection=collection,
        where=(("companyId", session.company_id),),
        order_by="createdAt",
        descending=True,
    )


class JobService:
    """
    Application service for job management operations.

    Opening a job marks it live and returns the JobAggregate through which
    all of its edits go; closing it makes any upload still in flight for
    that job stale.
    """

    def __init__(
        self,
        store: DocumentStore,
        tracker: OperationTracker,
        publisher: Optional[EventPublisher] = None,
        clock: Callable[[], datetime] = _utcnow,
        overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
    ):
        """
        Initialize JobService.

        Args:
            store: Document store holding jobs and customers
            tracker: Liveness tracker shared with MediaService
            publisher: Event publisher handed to every aggregate
            clock: Source of timestamps
            overdue_after: Grace period before a completed job's balance is overdue
        """
        self.store = store
        self.tracker = tracker
        self.publisher = publisher
        self.clock = clock
        self.overdue_after = overdue_after
        self.pipeline = StatusPipeline(clock)
        self.permissions = MediaPermissionModel(clock)

    def _load(self, job_id: str) -> Job:
        try:
            record = self.store.get(job_management.COLLECTION, job_id)
        except Exception as e:
            logger.error(f"Error loading job {job_id}: {e}")
            raise PersistenceError(f"Failed to load job {job_id}", original_error=e) from e
        if record is None:
            logger.warning(f"Job not found: {job_id}")
            raise JobNotFoundError(f"Job {job_id} not found")
        return Job.from_dict({**record, "id": record.get("id") or job_id})

    def get(self, job_id: str) -> Job:
        """
        Load a job snapshot without opening it.

        Raises:
            JobNotFoundError: If the job doesn't exist
            PersistenceError: If the store cannot be read
        """
        return self._load(job_id)

    def open(self, job_id: str) -> JobAggregate:
        """
        Load a job and mark it live.

        Raises:
            JobNotFoundError: If the job doesn't exist
            PersistenceError: If the store cannot be read
        """
        job = self._load(job_id)
        self.tracker.activate(job_id)
        logger.info(f"Opened job {job_id} ({job.job_number})")
        return JobAggregate(
            job,
            self.store,
            publisher=self.publisher,
            pipeline=self.pipeline,
            permissions=self.permissions,
            clock=self.clock,
        )

    def close(self, job_id: str) -> None:
        """Mark a job no longer live."""
        self.tracker.release(job_id)
        logger.info(f"Closed job {job_id}")

    def delete_job(self, job_id: str) -> bool:
        """
        Delete a job record. Its customer and blobs are left in place.

        Returns:
            True if the store deleted the record

        Raises:
            PersistenceError: If the store fails
        """
        self.tracker.release(job_id)
        try:
            deleted = self.store.delete(job_management.COLLECTION, job_id)
        except Exception as e:
            logger.error(f"Error deleting job {job_id}: {e}")
            raise PersistenceError(f"Failed to delete job {job_id}", original_error=e) from e
        logger.info(f"Deleted job {job_id}: {deleted}")
        return deleted

    def list_jobs(self, session: Session, job_filter: Optional[JobFilter] = None) -> List[Job]:
        """The company's jobs, newest first, narrowed by ``job_filter``."""
        records = self.store.query(_company_query(job_management.COLLECTION, session))
        jobs = [Job.from_dict(record) for record in records]
        return job_filter.apply(jobs) if job_filter else jobs

    def watch_jobs(
        self, session: Session, job_filter: Optional[JobFilter] = None
    ) -> Iterator[List[Job]]:
        """
        Live job list for the session's company, newest first.

        Yields a fresh filtered list for every change; never ends on its
        own. Call again to resubscribe.
        """
        query = _company_query(job_management.COLLECTION, session)
        for records in self.store.subscribe(query):
            jobs = [Job.from_dict(record) for record in records]
            yield job_filter.apply(jobs) if job_filter else jobs

    def financial_health(self, job: Job, now: Optional[datetime] = None) -> FinancialHealth:
        """Payment state of a job as of ``now`` (the service clock by default)."""
        return assess_financial_health(
            job.ledger,
            job.status.is_terminal(),
            job.completed_at,
            now or self.clock(),
            self.overdue_after,
        )

    def list_customers(self, session: Session, search: str = "") -> List[Customer]:
        """The company's customers, newest first, narrowed by ``search``."""
        records = self.store.query(_company_query(customer_domain.COLLECTION, session))
        return search_customers(search, [Customer.from_dict(r) for r in records])

    def watch_customers(self, session: Session, search: str = "") -> Iterator[List[Customer]]:
        """Live customer list for the session's company, newest first."""
        query = _company_query(customer_domain.COLLECTION, session)
        for records in self.store.subscribe(query):
            yield search_customers(search, [Customer.from_dict(r) for r in records])

    def backfill_customer_addresses(self, session: Session) -> int:
        """
        Copy customer addresses onto jobs that have none.

        Jobs created before addresses were denormalized onto the job record
        carry only a customerId. Each such job gets its customer's address
        and alternate address.

        Returns:
            Number of jobs updated

        Raises:
            PersistenceError: If a write fails
        """
        records = self.store.query(
            DocumentQuery(job_management.COLLECTION, where=(("companyId", session.company_id),))
        )
        count = 0
        for record in records:
            if record.get("customerAddress") or not record.get("customerId"):
                continue
            customer = self.store.get(customer_domain.COLLECTION, record["customerId"])
            if customer is None:
                continue
            fields = {
                "customerAddress": customer.get("address") or "",
                "customerAlternateAddress": customer.get("alternateAddress") or "",
            }
            if not self.store.put(job_management.COLLECTION, record["id"], fields):
                raise PersistenceError(f"Failed to update job {record['id']}")
            count += 1
        logger.info(f"Backfilled customer addresses on {count} job(s)")
        return count
