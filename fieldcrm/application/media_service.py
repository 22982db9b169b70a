"""
Media Application Service

Coordinates blob uploads and deletions with the media records on a job or
a draft lead. Uploads are the slow, cancelable part of the system: each
one is tagged with a liveness token, and a result that arrives after its
job or draft was closed is thrown away and its blob cleaned up.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple, Union

from fieldcrm.domain.errors import PersistenceError, StorageError
from fieldcrm.domain.events import BlobCleanupFailedEvent, UploadDiscardedEvent
from fieldcrm.domain.identity import Session
from fieldcrm.domain.leads import LeadDraft
from fieldcrm.domain.media import (
    BlobStorage,
    MediaAsset,
    MediaCategory,
    MediaPermissionModel,
    build_blob_path,
)

from .event_publisher import EventPublisher
from .job_aggregate import JobAggregate
from .operation_tracker import OperationToken, OperationTracker

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaService:
    """
    Application service for job and draft media.

    Blob delete failures never reach the caller: the record is the source
    of truth, so a leftover blob is logged and reported as an event.
    """

    def __init__(
        self,
        blob_storage: BlobStorage,
        tracker: OperationTracker,
        publisher: Optional[EventPublisher] = None,
        permissions: Optional[MediaPermissionModel] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.blob_storage = blob_storage
        self.tracker = tracker
        self.publisher = publisher
        self.clock = clock
        self.permissions = permissions or MediaPermissionModel(clock)

    def _publish(self, event) -> None:
        if self.publisher is not None:
            self.publisher.publish(event)

    def _upload(
        self,
        company_id: str,
        owner_id: str,
        category: MediaCategory,
        content: bytes,
    ) -> Tuple[OperationToken, str, str, str]:
        token = self.tracker.begin(owner_id)
        asset_id = uuid.uuid4().hex
        path = build_blob_path(company_id, owner_id, category, asset_id)

        logger.info(f"Uploading {category.value} asset {asset_id} for {owner_id}")
        try:
            url = self.blob_storage.upload(path, content)
        except StorageError:
            logger.error(f"Upload failed for {path}")
            raise
        except Exception as e:
            logger.error(f"Upload failed for {path}: {e}")
            raise StorageError(f"Failed to upload {path}", original_error=e) from e
        return token, asset_id, path, url

    def _discard_if_stale(self, token: OperationToken, url: str, category: MediaCategory) -> bool:
        if self.tracker.is_current(token):
            return False
        logger.warning(
            f"Discarding upload for {token.target_id}: closed before the upload finished"
        )
        self._delete_blob(token.target_id, url)
        self._publish(UploadDiscardedEvent(
            aggregate_id=token.target_id,
            occurred_at=self.clock(),
            url=url,
            category=category.value,
        ))
        return True

    def _delete_blob(self, owner_id: str, url: str) -> bool:
        try:
            deleted = self.blob_storage.delete(url)
        except Exception as e:
            logger.warning(f"Could not delete blob {url} for {owner_id}: {e}")
            self._publish(BlobCleanupFailedEvent(
                aggregate_id=owner_id,
                occurred_at=self.clock(),
                url=url,
                error_message=str(e),
            ))
            return False
        if not deleted:
            logger.warning(f"Blob store did not delete {url} for {owner_id}")
            self._publish(BlobCleanupFailedEvent(
                aggregate_id=owner_id,
                occurred_at=self.clock(),
                url=url,
                error_message="delete returned False",
            ))
        return bool(deleted)

    # ------------------------------------------------------------------
    # jobs

    def upload_to_job(
        self,
        aggregate: JobAggregate,
        category: Union[MediaCategory, str],
        content: bytes,
        name: Optional[str] = None,
        explicit_shared: Optional[bool] = None,
    ) -> Optional[MediaAsset]:
        """
        Upload content and record it on an open job.

        Args:
            aggregate: The open job
            category: Target folder
            content: File bytes
            name: Display name (required for documents)
            explicit_shared: Override of the folder default

        Returns:
            The recorded asset, or None when the job was closed while the
            upload was in flight

        Raises:
            UnknownCategoryError: If category is not one of the three
            MissingNameError: If a document has no name
            StaleOperationError: If the job is not open
            StorageError: If the upload fails
            PersistenceError: If recording the asset fails
        """
        resolved = MediaCategory.parse(category)
        self.permissions.require_name(resolved, name)

        job = aggregate.snapshot
        token, asset_id, path, url = self._upload(job.company_id, job.job_id, resolved, content)
        if self._discard_if_stale(token, url, resolved):
            return None

        try:
            return aggregate.attach_media(
                resolved,
                url,
                name=name,
                explicit_shared=explicit_shared,
                asset_id=asset_id,
                storage_path=path,
            )
        except PersistenceError:
            logger.error(f"Recording asset {asset_id} on {job.job_id} failed; removing its blob")
            self._delete_blob(job.job_id, url)
            raise

    def delete_media(self, aggregate: JobAggregate, asset_id: str) -> MediaAsset:
        """
        Delete an asset record, then its blob on a best-effort basis.

        Raises:
            AssetNotFoundError: If the asset is not on the job
            PersistenceError: If the record write fails
        """
        removed = aggregate.remove_media(asset_id)
        self._delete_blob(aggregate.job_id, removed.url)
        return removed

    def download(self, asset: MediaAsset) -> bytes:
        """
        Raises:
            StorageError: If the content cannot be fetched
        """
        try:
            return self.blob_storage.download(asset.url)
        except StorageError:
            logger.error(f"Download failed for {asset.url}")
            raise
        except Exception as e:
            logger.error(f"Download failed for {asset.url}: {e}")
            raise StorageError(f"Failed to download {asset.url}", original_error=e) from e

    # ------------------------------------------------------------------
    # drafts

    def upload_to_draft(
        self,
        session: Session,
        draft: LeadDraft,
        category: Union[MediaCategory, str],
        content: bytes,
        name: Optional[str] = None,
        explicit_shared: Optional[bool] = None,
    ) -> Tuple[LeadDraft, Optional[MediaAsset]]:
        """
        Upload content for a lead that has not been saved yet.

        The draft's own folder defaults apply. Returns the updated draft and
        the new asset; when the draft was abandoned mid-upload the draft is
        returned unchanged with no asset.
        """
        resolved = MediaCategory.parse(category)
        self.permissions.require_name(resolved, name)

        token, asset_id, path, url = self._upload(
            session.company_id, draft.draft_id, resolved, content
        )
        if self._discard_if_stale(token, url, resolved):
            return draft, None

        asset = self.permissions.create_asset(
            resolved,
            draft.folder_permissions,
            url,
            name=name,
            explicit_shared=explicit_shared,
            asset_id=asset_id,
            storage_path=path,
        )
        return replace(draft, media=draft.media.add(asset)), asset

    def delete_draft_media(self, draft: LeadDraft, asset_id: str) -> LeadDraft:
        """
        Raises:
            AssetNotFoundError: If the asset is not on the draft
        """
        removed = draft.media.find(asset_id)
        updated = replace(draft, media=draft.media.remove(asset_id))
        self._delete_blob(draft.draft_id, removed.url)
        return updated

    def set_draft_folder_default(
        self, draft: LeadDraft, category: Union[MediaCategory, str], value: bool
    ) -> LeadDraft:
        return replace(
            draft,
            folder_permissions=self.permissions.set_folder_default(
                draft.folder_permissions, category, value
            ),
        )

    def set_draft_asset_shared(self, draft: LeadDraft, asset_id: str, value: bool) -> LeadDraft:
        return replace(
            draft, media=self.permissions.set_asset_shared(draft.media, asset_id, value)
        )

    def recategorize_draft_asset(
        self, draft: LeadDraft, asset_id: str, category: Union[MediaCategory, str]
    ) -> LeadDraft:
        return replace(
            draft, media=self.permissions.recategorize(draft.media, asset_id, category)
        )
