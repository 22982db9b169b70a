"""
Unit tests for MediaService.

Covers uploads to open jobs and drafts, the discard path for uploads that
finish after their job was closed, and best-effort blob cleanup.
"""

import pytest

from fieldcrm.application import JobAggregate, MediaService
from fieldcrm.domain.errors import (
    MissingNameError,
    PersistenceError,
    StaleOperationError,
    StorageError,
)
from fieldcrm.domain.events import (
    BlobCleanupFailedEvent,
    MediaAttachedEvent,
    MediaRemovedEvent,
    UploadDiscardedEvent,
)
from fieldcrm.domain.leads import LeadDraft
from fieldcrm.domain.media import FolderPermissions, MediaCategory

from tests.fixtures import make_job


@pytest.fixture
def aggregate(store, publisher, clock, tracker):
    job = make_job(folder_permissions=FolderPermissions({"install": True}))
    store.seed("jobs", job.job_id, job.to_dict())
    tracker.activate(job.job_id)
    return JobAggregate(job, store, publisher=publisher, clock=clock)


@pytest.fixture
def service(blobs, tracker, publisher, clock):
    return MediaService(blobs, tracker, publisher=publisher, clock=clock)


class TestUploadToJob:
    """Test uploads recorded on an open job."""

    def test_upload_records_asset(self, service, aggregate, blobs, published):
        # Act
        asset = service.upload_to_job(aggregate, "install", b"jpeg-bytes")

        # Assert
        assert asset.shared is True
        assert asset.storage_path == f"acme/job-1/install/{asset.asset_id}"
        assert blobs.blobs[asset.url] == b"jpeg-bytes"
        assert aggregate.snapshot.media.find(asset.asset_id) == asset
        assert [type(e) for e in published] == [MediaAttachedEvent]

    def test_explicit_share_overrides_folder_default(self, service, aggregate):
        asset = service.upload_to_job(aggregate, "install", b"x", explicit_shared=False)
        assert asset.shared is False

    def test_document_requires_name_before_upload(self, service, aggregate, blobs):
        with pytest.raises(MissingNameError):
            service.upload_to_job(aggregate, MediaCategory.DOCUMENT, b"pdf")
        assert blobs.calls("upload") == []

    def test_closed_job_cannot_start_upload(self, service, aggregate, tracker, blobs):
        tracker.release(aggregate.job_id)
        with pytest.raises(StaleOperationError):
            service.upload_to_job(aggregate, "install", b"x")
        assert blobs.calls("upload") == []

    def test_upload_closed_mid_flight_is_discarded(
        self, service, aggregate, blobs, tracker, store, published
    ):
        """Closing the job while the upload runs drops the result and its blob."""
        # Arrange
        blobs.on_upload = lambda path: tracker.release(aggregate.job_id)

        # Act
        result = service.upload_to_job(aggregate, "install", b"late")

        # Assert
        assert result is None
        assert len(aggregate.snapshot.media) == 0
        assert store.puts() == []
        assert blobs.blobs == {}
        (event,) = published
        assert isinstance(event, UploadDiscardedEvent)
        assert event.category == "install"

    def test_reopened_job_still_discards_old_upload(self, service, aggregate, blobs, tracker):
        def close_and_reopen(path):
            tracker.release(aggregate.job_id)
            tracker.activate(aggregate.job_id)

        blobs.on_upload = close_and_reopen

        assert service.upload_to_job(aggregate, "install", b"late") is None

    def test_storage_failure_propagates(self, service, aggregate, blobs, store):
        blobs.fail_uploads = True
        with pytest.raises(StorageError):
            service.upload_to_job(aggregate, "install", b"x")
        assert store.puts() == []

    def test_failed_record_write_removes_uploaded_blob(self, service, aggregate, blobs, store):
        # Arrange
        store.fail_puts_for.add("jobs")

        # Act
        with pytest.raises(PersistenceError):
            service.upload_to_job(aggregate, "inspection", b"x")

        # Assert
        assert blobs.blobs == {}
        assert len(blobs.calls("delete")) == 1
        assert len(aggregate.snapshot.media) == 0

    def test_failed_record_write_reports_stuck_blob(
        self, service, aggregate, blobs, store, published
    ):
        store.fail_puts_for.add("jobs")
        blobs.delete_error = StorageError("permission denied")

        with pytest.raises(PersistenceError):
            service.upload_to_job(aggregate, "inspection", b"x")

        assert [type(e) for e in published] == [BlobCleanupFailedEvent]


class TestDeleteMedia:
    """Test record-first deletion with best-effort blob cleanup."""

    def test_delete_removes_record_and_blob(self, service, aggregate, blobs, published):
        asset = service.upload_to_job(aggregate, "install", b"x")

        service.delete_media(aggregate, asset.asset_id)

        assert len(aggregate.snapshot.media) == 0
        assert asset.url not in blobs.blobs
        assert isinstance(published[-1], MediaRemovedEvent)

    def test_blob_delete_error_is_reported_not_raised(
        self, service, aggregate, blobs, published
    ):
        asset = service.upload_to_job(aggregate, "install", b"x")
        blobs.delete_error = StorageError("permission denied")

        removed = service.delete_media(aggregate, asset.asset_id)

        assert removed.asset_id == asset.asset_id
        assert len(aggregate.snapshot.media) == 0
        event = published[-1]
        assert isinstance(event, BlobCleanupFailedEvent)
        assert event.url == asset.url
        assert "permission denied" in event.error_message

    def test_blob_delete_returning_false_is_reported(self, service, aggregate, blobs, published):
        asset = service.upload_to_job(aggregate, "install", b"x")
        blobs.delete_returns = False

        service.delete_media(aggregate, asset.asset_id)

        assert isinstance(published[-1], BlobCleanupFailedEvent)

    def test_download(self, service, aggregate):
        asset = service.upload_to_job(aggregate, "inspection", b"photo")
        assert service.download(asset) == b"photo"

    def test_download_transport_error_becomes_storage_error(self, service, aggregate, blobs):
        asset = service.upload_to_job(aggregate, "inspection", b"photo")
        cause = TimeoutError("read timed out")
        blobs.download_error = cause

        with pytest.raises(StorageError) as exc_info:
            service.download(asset)

        assert exc_info.value.original_error is cause

    def test_download_storage_error_propagates_unchanged(self, service, aggregate, blobs):
        asset = service.upload_to_job(aggregate, "inspection", b"photo")
        error = StorageError("Blob not found")
        blobs.download_error = error

        with pytest.raises(StorageError) as exc_info:
            service.download(asset)

        assert exc_info.value is error


class TestDraftMedia:
    """Test media handled before a lead is saved."""

    @pytest.fixture
    def draft(self, tracker):
        draft = LeadDraft(name="Jane Doe", address="1 Main St")
        tracker.activate(draft.draft_id)
        return draft

    def test_upload_uses_draft_defaults(self, service, session, draft):
        draft = service.set_draft_folder_default(draft, "inspection", True)

        updated, asset = service.upload_to_draft(session, draft, "inspection", b"x")

        assert asset.shared is True
        assert asset.storage_path.startswith(f"acme/{draft.draft_id}/inspection/")
        assert updated.media.find(asset.asset_id) == asset
        assert len(draft.media) == 0

    def test_abandoned_draft_discards_upload(self, service, session, draft, blobs, tracker):
        blobs.on_upload = lambda path: tracker.release(draft.draft_id)

        updated, asset = service.upload_to_draft(session, draft, "install", b"x")

        assert asset is None
        assert updated is draft
        assert blobs.blobs == {}

    def test_share_recategorize_and_delete(self, service, session, draft, blobs):
        draft, asset = service.upload_to_draft(session, draft, "inspection", b"x")

        draft = service.set_draft_asset_shared(draft, asset.asset_id, True)
        draft = service.recategorize_draft_asset(draft, asset.asset_id, "install")
        moved = draft.media.find(asset.asset_id)
        assert (moved.category, moved.shared) == (MediaCategory.INSTALL, True)

        draft = service.delete_draft_media(draft, asset.asset_id)
        assert len(draft.media) == 0
        assert blobs.blobs == {}
