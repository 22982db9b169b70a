"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from fieldcrm.domain.events import (
    BlobCleanupFailedEvent,
    DomainEvent,
    FolderDefaultChangedEvent,
    JobStatusChangedEvent,
    LeadCreatedEvent,
    LedgerUpdatedEvent,
    MediaAttachedEvent,
    MediaRecategorizedEvent,
    MediaRemovedEvent,
    MediaShareChangedEvent,
    PaymentAddedEvent,
    PaymentRemovedEvent,
    UploadDiscardedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribe ``handle`` to ``DomainEvent`` to log everything.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, PaymentAddedEvent):
                self._handle_payment_added(event)
            elif isinstance(event, PaymentRemovedEvent):
                self._handle_payment_removed(event)
            elif isinstance(event, LedgerUpdatedEvent):
                self._handle_ledger_updated(event)
            elif isinstance(event, JobStatusChangedEvent):
                self._handle_status_changed(event)
            elif isinstance(event, MediaAttachedEvent):
                self._handle_media_attached(event)
            elif isinstance(event, (MediaShareChangedEvent, MediaRecategorizedEvent,
                                    MediaRemovedEvent, FolderDefaultChangedEvent)):
                self._handle_media_changed(event)
            elif isinstance(event, BlobCleanupFailedEvent):
                self._handle_cleanup_failed(event)
            elif isinstance(event, UploadDiscardedEvent):
                self._handle_upload_discarded(event)
            elif isinstance(event, LeadCreatedEvent):
                self._handle_lead_created(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_payment_added(self, event: PaymentAddedEvent) -> None:
        self.logger.info(
            f"Payment added: job_id={event.aggregate_id}, amount={event.amount:.2f}, "
            f"balance={event.balance:.2f}"
        )

    def _handle_payment_removed(self, event: PaymentRemovedEvent) -> None:
        self.logger.info(
            f"Payment removed: job_id={event.aggregate_id}, index={event.index}, "
            f"amount={event.amount:.2f}, balance={event.balance:.2f}"
        )

    def _handle_ledger_updated(self, event: LedgerUpdatedEvent) -> None:
        self.logger.info(
            f"Ledger updated: job_id={event.aggregate_id}, field={event.field}, "
            f"balance={event.balance:.2f}"
        )
        if event.balance < 0:
            self.logger.warning(
                f"Job {event.aggregate_id} is overpaid by {-event.balance:.2f}"
            )

    def _handle_status_changed(self, event: JobStatusChangedEvent) -> None:
        self.logger.info(
            f"Job status changed: job_id={event.aggregate_id}, "
            f"{event.previous_status} -> {event.status}"
        )

    def _handle_media_attached(self, event: MediaAttachedEvent) -> None:
        self.logger.info(
            f"Media attached: job_id={event.aggregate_id}, asset_id={event.asset_id}, "
            f"category={event.category}, shared={event.shared}"
        )

    def _handle_media_changed(self, event: DomainEvent) -> None:
        self.logger.info(f"Media changed: {event.to_dict()}")

    def _handle_cleanup_failed(self, event: BlobCleanupFailedEvent) -> None:
        self.logger.warning(
            f"Blob left behind for {event.aggregate_id}: {event.url} ({event.error_message})"
        )

    def _handle_upload_discarded(self, event: UploadDiscardedEvent) -> None:
        self.logger.warning(
            f"Upload discarded for closed target {event.aggregate_id}: {event.url}"
        )

    def _handle_lead_created(self, event: LeadCreatedEvent) -> None:
        self.logger.info(
            f"Lead created: job_id={event.aggregate_id}, job_number={event.job_number}, "
            f"customer_id={event.customer_id}, new_customer={event.new_customer}"
        )
