"""
Local File Blob Storage

BlobStorage implementation on the local filesystem, for development and
tests. URLs are ``file://`` URLs of the stored files.
"""

import logging
import os
from pathlib import Path

from fieldcrm.domain.errors import StorageError
from fieldcrm.domain.media import BlobStorage

logger = logging.getLogger(__name__)

URL_SCHEME = "file://"


class LocalBlobStorage(BlobStorage):
    """
    Filesystem-backed blob store rooted at ``storage_dir``.

    Paths must stay inside the root; anything resolving outside it is
    rejected.
    """

    def __init__(self, storage_dir: str = "/tmp/fieldcrm-blobs"):
        """
        Initialize local blob storage.

        Args:
            storage_dir: Base directory for blobs

        Raises:
            StorageError: If the directory cannot be created
        """
        self.storage_dir = Path(storage_dir).resolve()
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create storage directory: {e}", original_error=e) from e

    def is_available(self) -> bool:
        """Whether the storage directory exists and is writable."""
        return self.storage_dir.exists() and os.access(self.storage_dir, os.W_OK)

    def _resolve_path(self, path: str) -> Path:
        target = (self.storage_dir / path).resolve()
        if target != self.storage_dir and self.storage_dir not in target.parents:
            raise StorageError(f"Path escapes storage directory: {path}")
        return target

    def _resolve_url(self, url: str) -> Path:
        if not url.startswith(URL_SCHEME):
            raise StorageError(f"Not a local blob URL: {url}")
        return self._resolve_path(os.path.relpath(url[len(URL_SCHEME):], self.storage_dir))

    def upload(self, path: str, content: bytes) -> str:
        target = self._resolve_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to save {path}: {e}", original_error=e) from e
        logger.debug(f"Stored {len(content)} bytes at {target}")
        return f"{URL_SCHEME}{target}"

    def delete(self, url: str) -> bool:
        target = self._resolve_url(url)
        try:
            target.unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.warning(f"Failed to delete {target}: {e}")
            return False

        # Clean up empty parent directories up to the root
        parent = target.parent
        while parent != self.storage_dir:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
        return True

    def download(self, url: str) -> bytes:
        target = self._resolve_url(url)
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {url}: {e}", original_error=e) from e
