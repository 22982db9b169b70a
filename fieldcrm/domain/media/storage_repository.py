"""
Blob Storage Repository Interface

Abstract interface for the blob store that holds uploaded photos and
documents. The domain layer defines the contract; infrastructure provides
local-filesystem and Google Cloud Storage implementations.
"""

from abc import ABC, abstractmethod

from .value_objects import MediaCategory


def build_blob_path(company_id: str, owner_id: str, category: MediaCategory, asset_id: str) -> str:
    """
    Namespace a blob as ``{company}/{job-or-lead}/{category}/{id}``.

    Args:
        company_id: Owning company
        owner_id: Job storage id, or draft lead id before the job exists
        category: Media category
        asset_id: Asset identifier

    Returns:
        Relative blob path
    """
    parts = [company_id, owner_id, category.value, asset_id]
    for part in parts:
        if not part or "/" in part:
            raise ValueError(f"Invalid blob path segment: {part!r}")
    return "/".join(parts)


class BlobStorage(ABC):
    """
    Interface for binary asset storage.

    Contract Guarantees:
    - upload() returns a URL that download() and delete() accept
    - delete() is idempotent; deleting a missing blob succeeds
    - Failures of upload() and download() raise StorageError

    Thread Safety:
    - Implementations should be safe for concurrent uploads to distinct paths
    """

    @abstractmethod
    def upload(self, path: str, content: bytes) -> str:
        """
        Store content at ``path``.

        Args:
            path: Relative blob path (see build_blob_path)
            content: Raw bytes

        Returns:
            URL of the stored blob

        Raises:
            StorageError: If the upload fails or times out
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, url: str) -> bool:
        """
        Remove the blob behind ``url``.

        Returns:
            True if deleted or already absent, False on failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def download(self, url: str) -> bytes:
        """
        Fetch the blob behind ``url``.

        Raises:
            StorageError: If the blob is missing or cannot be read
        """
        pass  # pragma: no cover
