"""
Lead Application Service

Turns a draft lead into a customer record and a job record.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from fieldcrm.domain import customers as customer_domain
from fieldcrm.domain import job_management
from fieldcrm.domain.customers import Customer, GeoLocation
from fieldcrm.domain.document_store import DocumentStore
from fieldcrm.domain.errors import OrphanCustomerError, PersistenceError
from fieldcrm.domain.events import LeadCreatedEvent
from fieldcrm.domain.identity import Session
from fieldcrm.domain.job_management import Job, StatusPipeline, generate_job_number
from fieldcrm.domain.leads import LeadDraft

from .event_publisher import EventPublisher
from .operation_tracker import OperationTracker

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Optional[GeoLocation]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class LeadService:
    """
    Application service for creating leads.

    Saving writes the customer first and the job second. There is no
    transaction across the two: if the job write fails after a new
    customer was written, the customer is left behind and the caller gets
    an OrphanCustomerError naming it.
    """

    def __init__(
        self,
        store: DocumentStore,
        tracker: OperationTracker,
        publisher: Optional[EventPublisher] = None,
        geocoder: Optional[Geocoder] = None,
        pipeline: Optional[StatusPipeline] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        """
        Initialize LeadService.

        Args:
            store: Document store for customers and jobs
            tracker: Liveness tracker; drafts are live until saved or abandoned
            publisher: Receives LeadCreatedEvent
            geocoder: Optional address lookup; failures never block a save
            pipeline: Status pipeline used for the initial completedAt
            clock: Source of timestamps
            id_factory: Storage id generator
        """
        self.store = store
        self.tracker = tracker
        self.publisher = publisher
        self.geocoder = geocoder
        self.clock = clock
        self.pipeline = pipeline or StatusPipeline(clock)
        self.id_factory = id_factory

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def start_draft(self) -> LeadDraft:
        """Open a new draft lead and mark it live for uploads."""
        draft = LeadDraft(job_number=generate_job_number(self._now_ms()))
        self.tracker.activate(draft.draft_id)
        logger.debug(f"Started draft {draft.draft_id} ({draft.job_number})")
        return draft

    def abandon_draft(self, draft: LeadDraft) -> None:
        """Close a draft without saving; its in-flight uploads are discarded."""
        self.tracker.release(draft.draft_id)
        logger.info(f"Abandoned draft {draft.draft_id}")

    @staticmethod
    def candidates(draft: LeadDraft, customers: Iterable[Customer]) -> List[Customer]:
        """Existing customers the typed name may refer to."""
        return draft.candidates(customers)

    def _geocode(self, address: str) -> Optional[GeoLocation]:
        if self.geocoder is None:
            return None
        try:
            location = self.geocoder(address)
        except Exception as e:
            logger.warning(f"Geocoding failed for {address!r}: {e}")
            return None
        if location is None:
            logger.info(f"Geocoder found nothing for {address!r}")
        return location

    def _put(self, collection: str, doc_id: str, fields) -> None:
        try:
            ok = self.store.put(collection, doc_id, fields)
        except Exception as e:
            raise PersistenceError(
                f"Failed to write {collection}/{doc_id}", original_error=e
            ) from e
        if not ok:
            raise PersistenceError(f"Failed to write {collection}/{doc_id}")

    def save(self, session: Session, draft: LeadDraft) -> Job:
        """
        Persist a draft as a customer (unless one is selected) and a job.

        Args:
            session: Signed-in session; supplies company and assignee
            draft: Draft to save

        Returns:
            The created job snapshot

        Raises:
            IncompleteLeadError: If name or address is blank
            PersistenceError: If the customer write or the job write fails
            OrphanCustomerError: If the job write fails after a new
                customer was written
        """
        draft.require_valid()

        now_ms = self._now_ms()
        company_id = session.company_id
        existing = draft.selected_customer
        customer_id = existing.customer_id if existing else self.id_factory()
        job_id = self.id_factory()

        job = draft.build_job(
            job_id=job_id,
            customer_id=customer_id,
            company_id=company_id,
            now_ms=now_ms,
            completed_at=self.pipeline.initial_completed_at(draft.status),
            assigned_user_ids=(session.user_id,) if session.user_id else (),
        )

        if existing is None:
            customer = draft.build_customer(
                customer_id, company_id, now_ms, location=self._geocode(draft.address)
            )
            logger.info(f"Creating customer {customer_id} for company {company_id}")
            self._put(customer_domain.COLLECTION, customer_id, customer.to_dict())
        else:
            logger.info(f"Linking job {job_id} to existing customer {customer_id}")

        try:
            self._put(job_management.COLLECTION, job_id, job.to_dict())
        except PersistenceError as e:
            if existing is None:
                logger.error(
                    f"Job write failed after customer {customer_id} was created; "
                    f"customer record is orphaned"
                )
                raise OrphanCustomerError(
                    f"Customer {customer_id} was saved but job {job_id} was not",
                    customer_id=customer_id,
                    original_error=e.original_error or e,
                ) from e
            logger.error(f"Job write failed for {job_id}")
            raise

        self.tracker.release(draft.draft_id)
        logger.info(f"Created job {job_id} ({job.job_number}) with status {job.status.value}")

        if self.publisher is not None:
            self.publisher.publish(LeadCreatedEvent(
                aggregate_id=job_id,
                occurred_at=self.clock(),
                customer_id=customer_id,
                job_number=job.job_number,
                new_customer=existing is None,
            ))
        return job
