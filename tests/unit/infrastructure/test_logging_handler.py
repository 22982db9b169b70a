"""
Unit tests for LoggingEventHandler.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from fieldcrm.domain.events import (
    BlobCleanupFailedEvent,
    LeadCreatedEvent,
    LedgerUpdatedEvent,
    MediaShareChangedEvent,
    PaymentAddedEvent,
)
from fieldcrm.infrastructure.event_handlers import LoggingEventHandler

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


class TestLoggingEventHandler:
    """Test how each event is logged."""

    def test_payment_added_logs_info(self):
        logger = MagicMock()
        LoggingEventHandler(logger).handle(
            PaymentAddedEvent("job-1", NOW, amount=200.0, index=0, balance=800.0)
        )

        logger.info.assert_called_once()
        message = logger.info.call_args[0][0]
        assert "job-1" in message and "200.00" in message

    def test_overpayment_warns(self):
        logger = MagicMock()
        LoggingEventHandler(logger).handle(
            LedgerUpdatedEvent("job-1", NOW, field="contractAmount", balance=-50.0)
        )

        logger.info.assert_called_once()
        logger.warning.assert_called_once()
        assert "50.00" in logger.warning.call_args[0][0]

    def test_cleanup_failure_warns(self):
        logger = MagicMock()
        LoggingEventHandler(logger).handle(
            BlobCleanupFailedEvent("job-1", NOW, url="gs://b/x", error_message="denied")
        )
        assert "gs://b/x" in logger.warning.call_args[0][0]

    def test_media_and_lead_events_log_info(self):
        logger = MagicMock()
        handler = LoggingEventHandler(logger)

        handler.handle(MediaShareChangedEvent("job-1", NOW, asset_id="a1", shared=True))
        handler.handle(LeadCreatedEvent("job-1", NOW, customer_id="c1",
                                        job_number="JOB-1", new_customer=True))

        assert logger.info.call_count == 2

    def test_logging_failure_is_contained(self):
        logger = MagicMock()
        logger.info.side_effect = [RuntimeError("handler down"), None]

        LoggingEventHandler(logger).handle(
            PaymentAddedEvent("job-1", NOW, amount=1.0, index=0, balance=0.0)
        )

        logger.error.assert_called_once()
