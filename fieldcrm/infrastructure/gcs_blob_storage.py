"""
Google Cloud Storage Blob Storage

BlobStorage implementation on a Google Cloud Storage bucket. URLs are
``gs://{bucket}/{path}``.
"""

import logging
from datetime import timedelta
from typing import Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from fieldcrm.domain.errors import StorageError
from fieldcrm.domain.media import BlobStorage

logger = logging.getLogger(__name__)


class GCSBlobStorage(BlobStorage):
    """
    Google Cloud Storage implementation of BlobStorage.

    Thread Safety:
        The GCS client handles concurrent operations safely.

    Attributes:
        bucket_name: Name of the GCS bucket
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(
        self,
        bucket_name: str,
        client: Optional[storage.Client] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize GCS blob storage.

        Args:
            bucket_name: Bucket holding the blobs
            client: Preconfigured client; default credentials when omitted
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)
        self.timeout = timeout

    def _url_prefix(self) -> str:
        return f"gs://{self.bucket_name}/"

    def _blob_name(self, url: str) -> str:
        prefix = self._url_prefix()
        if not url.startswith(prefix):
            raise StorageError(f"URL {url} is not in bucket {self.bucket_name}")
        return url[len(prefix):]

    def upload(self, path: str, content: bytes) -> str:
        if not path or not path.strip():
            raise ValueError("path cannot be empty")
        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(content, timeout=self.timeout)
        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload {path} to GCS: {e}", original_error=e) from e
        logger.debug(f"Uploaded {len(content)} bytes to gs://{self.bucket_name}/{path}")
        return f"{self._url_prefix()}{path}"

    def delete(self, url: str) -> bool:
        blob_name = self._blob_name(url)
        try:
            self.bucket.blob(blob_name).delete(timeout=self.timeout)
        except NotFound:
            return True
        except GoogleCloudError as e:
            logger.warning(f"Failed to delete {url} from GCS: {e}")
            return False
        return True

    def download(self, url: str) -> bytes:
        blob_name = self._blob_name(url)
        try:
            return self.bucket.blob(blob_name).download_as_bytes(timeout=self.timeout)
        except NotFound as e:
            raise StorageError(f"Blob not found: {url}", original_error=e) from e
        except GoogleCloudError as e:
            raise StorageError(f"Failed to download {url}: {e}", original_error=e) from e

    def generate_signed_url(self, url: str, ttl_minutes: int = 10) -> str:
        """
        Generate a time-limited HTTPS link for showing a blob to a customer.

        Raises:
            StorageError: If signing fails
        """
        blob_name = self._blob_name(url)
        try:
            return self.bucket.blob(blob_name).generate_signed_url(
                version="v4",
                expiration=timedelta(minutes=ttl_minutes),
                method="GET",
            )
        except GoogleCloudError as e:
            raise StorageError(f"Failed to sign {url}: {e}", original_error=e) from e
