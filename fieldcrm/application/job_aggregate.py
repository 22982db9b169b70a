"""
Job Aggregate

Owns the in-memory snapshot of one open job and is the only component
that writes job state. Every operation follows the same steps:

1. validate through the pure domain component (no write on failure)
2. build one complete next snapshot
3. write only the changed top-level fields
4. swap the snapshot in, then publish events

The snapshot is replaced only after the store accepted the write, so a
concurrent caller never sees a half-applied change. Writes from other
sessions are not locked against: the store keeps the last write per field.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from fieldcrm.domain.document_store import DocumentStore
from fieldcrm.domain.errors import PersistenceError
from fieldcrm.domain.events import (
    DomainEvent,
    FolderDefaultChangedEvent,
    JobStatusChangedEvent,
    LedgerUpdatedEvent,
    MediaAttachedEvent,
    MediaRecategorizedEvent,
    MediaRemovedEvent,
    MediaShareChangedEvent,
    PaymentAddedEvent,
    PaymentRemovedEvent,
)
from fieldcrm.domain.job_management import (
    COLLECTION,
    DETAIL_FIELDS,
    InsuranceDetails,
    Job,
    JobCosts,
    JobStatus,
    JobType,
    StatusPipeline,
    changed_fields,
)
from fieldcrm.domain.media import MediaAsset, MediaCategory, MediaPermissionModel

from .event_publisher import EventPublisher

logger = logging.getLogger(__name__)

_LEDGER_INPUTS = ("contractAmount", "depositAmount", "isDepositPaid", "payments")
_STATUS_FIELDS = ("status", "completedAt")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobAggregate:
    """
    Orchestrates all mutations of a single job.

    Balance is written whenever any of its inputs is, and status is always
    written together with completedAt.
    """

    def __init__(
        self,
        job: Job,
        store: DocumentStore,
        publisher: Optional[EventPublisher] = None,
        pipeline: Optional[StatusPipeline] = None,
        permissions: Optional[MediaPermissionModel] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the aggregate around a loaded snapshot.

        Args:
            job: Current persisted snapshot
            store: Document store receiving partial writes
            publisher: Receives events after successful writes
            pipeline: Status pipeline (shares ``clock`` when omitted)
            permissions: Media permission model (shares ``clock`` when omitted)
            clock: Source of event timestamps
        """
        self._job = job
        self._store = store
        self._publisher = publisher
        self._clock = clock
        self._pipeline = pipeline or StatusPipeline(clock)
        self._permissions = permissions or MediaPermissionModel(clock)
        self._lock = Lock()

    @property
    def snapshot(self) -> Job:
        """The last successfully written (or refreshed) snapshot."""
        return self._job

    @property
    def job_id(self) -> str:
        return self._job.job_id

    # ------------------------------------------------------------------
    # internals

    def _fields_to_write(self, before: Job, after: Job) -> Dict[str, Any]:
        fields = changed_fields(before, after)
        if not fields:
            return fields
        new = after.to_dict()
        if any(key in fields for key in _LEDGER_INPUTS):
            fields["balance"] = new["balance"]
        if any(key in fields for key in _STATUS_FIELDS):
            for key in _STATUS_FIELDS:
                fields[key] = new[key]
        return fields

    def _write(self, fields: Dict[str, Any]) -> None:
        try:
            ok = self._store.put(COLLECTION, self._job.job_id, fields)
        except Exception as e:
            logger.error(f"Write to job {self._job.job_id} failed: {e}")
            raise PersistenceError(
                f"Failed to save job {self._job.job_id}", original_error=e
            ) from e
        if not ok:
            logger.error(f"Write to job {self._job.job_id} was rejected by the store")
            raise PersistenceError(f"Failed to save job {self._job.job_id}")

    def _commit(
        self,
        build: Callable[[Job], Job],
        describe: Callable[[Job, Job], Iterable[DomainEvent]] = lambda before, after: (),
    ) -> Job:
        """
        Build, write and adopt the next snapshot.

        ``build`` runs under the lock against the current snapshot and may
        raise a validation error; nothing is written in that case.
        """
        with self._lock:
            before = self._job
            after = build(before)
            fields = self._fields_to_write(before, after)
            if not fields:
                logger.debug(f"No changes to write for job {before.job_id}")
                return before
            self._write(fields)
            self._job = after
            events: List[DomainEvent] = list(describe(before, after))

        logger.debug(f"Wrote {sorted(fields)} to job {after.job_id}")
        if self._publisher is not None:
            for event in events:
                self._publisher.publish(event)
        return after

    # ------------------------------------------------------------------
    # ledger

    def add_payment(self, amount: float) -> Job:
        """
        Append a payment.

        Raises:
            InvalidAmountError: If amount is not a positive finite number
            PersistenceError: If the write fails
        """
        def describe(before, after):
            yield PaymentAddedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                amount=after.ledger.payments[-1],
                index=len(after.ledger.payments) - 1,
                balance=after.ledger.balance,
            )

        return self._commit(
            lambda job: replace(job, ledger=job.ledger.add_payment(amount)), describe
        )

    def remove_payment(self, index: int) -> Job:
        """
        Remove the payment at ``index``.

        Raises:
            IndexOutOfRangeError: If index is not a valid position
            PersistenceError: If the write fails
        """
        def describe(before, after):
            yield PaymentRemovedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                amount=before.ledger.payments[index],
                index=index,
                balance=after.ledger.balance,
            )

        return self._commit(
            lambda job: replace(job, ledger=job.ledger.remove_payment(index)), describe
        )

    def _ledger_event(self, field_name: str):
        def describe(before, after):
            yield LedgerUpdatedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                field=field_name,
                balance=after.ledger.balance,
            )
        return describe

    def set_deposit_paid(self, flag: bool) -> Job:
        return self._commit(
            lambda job: replace(job, ledger=job.ledger.set_deposit_paid(flag)),
            self._ledger_event("isDepositPaid"),
        )

    def set_contract_amount(self, amount: float) -> Job:
        """
        Raises:
            InvalidAmountError: If amount is negative or not finite
        """
        return self._commit(
            lambda job: replace(job, ledger=job.ledger.set_contract_amount(amount)),
            self._ledger_event("contractAmount"),
        )

    def set_deposit_amount(self, amount: float) -> Job:
        """
        Raises:
            InvalidAmountError: If amount is negative or not finite
        """
        return self._commit(
            lambda job: replace(job, ledger=job.ledger.set_deposit_amount(amount)),
            self._ledger_event("depositAmount"),
        )

    # ------------------------------------------------------------------
    # status

    def change_status(self, target: Union[JobStatus, str]) -> Job:
        """
        Move the job to ``target``. Only status and completedAt are written.

        Raises:
            UnknownStatusError: If target is not a pipeline status
            PersistenceError: If the write fails
        """
        def build(job):
            moved = self._pipeline.transition(job.status, target, job.completed_at)
            if not moved.changed:
                return job
            return replace(job, status=moved.status, completed_at=moved.completed_at)

        def describe(before, after):
            yield JobStatusChangedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                previous_status=before.status.value,
                status=after.status.value,
                completed_at=after.completed_at,
            )

        return self._commit(build, describe)

    # ------------------------------------------------------------------
    # media

    def attach_media(
        self,
        category: Union[MediaCategory, str],
        url: str,
        name: Optional[str] = None,
        explicit_shared: Optional[bool] = None,
        asset_id: Optional[str] = None,
        storage_path: Optional[str] = None,
    ) -> MediaAsset:
        """
        Record a completed upload.

        The asset's ``shared`` flag is the folder default in force now,
        unless ``explicit_shared`` is given.

        Returns:
            The recorded asset

        Raises:
            UnknownCategoryError: If category is not one of the three
            MissingNameError: If a document has no name
            PersistenceError: If the write fails
        """
        created = []

        def build(job):
            asset = self._permissions.create_asset(
                category,
                job.folder_permissions,
                url,
                name=name,
                explicit_shared=explicit_shared,
                asset_id=asset_id,
                storage_path=storage_path,
            )
            created.append(asset)
            return replace(job, media=job.media.add(asset))

        def describe(before, after):
            asset = created[0]
            yield MediaAttachedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                asset_id=asset.asset_id,
                category=asset.category.value,
                shared=asset.shared,
            )

        self._commit(build, describe)
        return created[0]

    def set_asset_shared(self, asset_id: str, value: bool) -> Job:
        """
        Override one asset's visibility.

        Raises:
            AssetNotFoundError: If the asset is not on this job
        """
        def describe(before, after):
            yield MediaShareChangedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                asset_id=asset_id,
                shared=bool(value),
            )

        return self._commit(
            lambda job: replace(
                job, media=self._permissions.set_asset_shared(job.media, asset_id, value)
            ),
            describe,
        )

    def toggle_asset_share(self, asset_id: str) -> Job:
        """Flip one asset's visibility."""
        current = self._job.media.find(asset_id)
        return self.set_asset_shared(asset_id, not current.shared)

    def set_folder_default(self, category: Union[MediaCategory, str], value: bool) -> Job:
        """
        Change the default for future uploads in ``category``.

        Existing assets keep their flags.

        Raises:
            UnknownCategoryError: If category is not one of the three
        """
        def describe(before, after):
            yield FolderDefaultChangedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                category=MediaCategory.parse(category).value,
                shared=bool(value),
            )

        return self._commit(
            lambda job: replace(
                job,
                folder_permissions=self._permissions.set_folder_default(
                    job.folder_permissions, category, value
                ),
            ),
            describe,
        )

    def recategorize_asset(self, asset_id: str, category: Union[MediaCategory, str]) -> Job:
        """
        Move an asset to another folder without touching ``shared``.

        Raises:
            UnknownCategoryError: If category is not one of the three
            AssetNotFoundError: If the asset is not on this job
            MissingNameError: If a nameless asset is moved into documents
        """
        def describe(before, after):
            yield MediaRecategorizedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                asset_id=asset_id,
                previous_category=before.media.find(asset_id).category.value,
                category=after.media.find(asset_id).category.value,
            )

        return self._commit(
            lambda job: replace(
                job, media=self._permissions.recategorize(job.media, asset_id, category)
            ),
            describe,
        )

    def remove_media(self, asset_id: str) -> MediaAsset:
        """
        Delete an asset record. The blob itself is not touched here.

        Returns:
            The removed asset

        Raises:
            AssetNotFoundError: If the asset is not on this job
            PersistenceError: If the write fails
        """
        removed = []

        def build(job):
            removed.append(job.media.find(asset_id))
            return replace(job, media=job.media.remove(asset_id))

        def describe(before, after):
            yield MediaRemovedEvent(
                aggregate_id=after.job_id,
                occurred_at=self._clock(),
                asset_id=asset_id,
                url=removed[0].url,
            )

        self._commit(build, describe)
        return removed[0]

    # ------------------------------------------------------------------
    # descriptive fields

    def update_details(self, **changes: str) -> Job:
        """
        Edit descriptive fields such as ``job_name`` or ``measurements``.

        Raises:
            ValueError: If a field name is not a descriptive field
        """
        unknown = set(changes) - set(DETAIL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown detail fields: {sorted(unknown)}")
        return self._commit(lambda job: job.with_details(**changes))

    def set_trades(self, trades: Iterable[str]) -> Job:
        cleaned = tuple(t.strip() for t in trades if t and t.strip())
        return self._commit(lambda job: replace(job, trades=cleaned))

    def set_job_type(self, job_type: Union[JobType, str]) -> Job:
        resolved = JobType(job_type)
        return self._commit(lambda job: replace(job, job_type=resolved))

    def set_insurance(self, insurance: Optional[InsuranceDetails]) -> Job:
        """Replace the insurance record; None or an empty record clears it."""
        if insurance is not None and insurance.is_empty():
            insurance = None
        return self._commit(lambda job: replace(job, insurance=insurance))

    def set_costs(self, costs: JobCosts) -> Job:
        return self._commit(lambda job: replace(job, costs=costs))

    # ------------------------------------------------------------------
    # realtime feed

    def refresh(self, job: Job) -> Job:
        """
        Adopt a snapshot delivered by the realtime feed.

        Raises:
            ValueError: If the snapshot belongs to another job
        """
        if job.job_id != self._job.job_id:
            raise ValueError(
                f"Snapshot for {job.job_id} cannot refresh job {self._job.job_id}"
            )
        with self._lock:
            self._job = job
        return job
