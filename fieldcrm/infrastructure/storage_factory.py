"""
Storage Factory

Selects the blob storage backend from configuration: Google Cloud Storage
when a bucket is configured and reachable, the local filesystem otherwise.
"""

import logging
from typing import Optional

from fieldcrm.config.gcs_config import get_gcs_client, init_gcs
from fieldcrm.config.settings import CrmConfig
from fieldcrm.domain.media import BlobStorage

from .local_blob_storage import LocalBlobStorage

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for BlobStorage implementations.

    Selection Logic:
    - If GCS_BUCKET_NAME is configured, attempt to use GCS storage
    - Otherwise, or if GCS cannot be initialized, use local storage
    """

    @staticmethod
    def create_storage(config: Optional[CrmConfig] = None) -> BlobStorage:
        """
        Create blob storage based on configuration.

        Args:
            config: Settings; read from the environment when omitted

        Returns:
            BlobStorage implementation (either local or GCS)
        """
        config = config or CrmConfig()
        if config.gcs_bucket_name:
            return StorageFactory._create_gcs_storage(config)
        return StorageFactory._create_local_storage(config.blob_dir)

    @staticmethod
    def _create_local_storage(blob_dir: str) -> BlobStorage:
        try:
            storage = LocalBlobStorage(blob_dir)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e
        logger.info(f"Storage factory: Using local filesystem storage at {blob_dir}")
        return storage

    @staticmethod
    def _create_gcs_storage(config: CrmConfig) -> BlobStorage:
        if not init_gcs(config.gcs_bucket_name):
            logger.warning("GCS unavailable, falling back to local filesystem storage")
            return StorageFactory._create_local_storage(config.blob_dir)

        from .gcs_blob_storage import GCSBlobStorage

        storage = GCSBlobStorage(config.gcs_bucket_name, client=get_gcs_client())
        logger.info(f"Storage factory: Using GCS storage with bucket {config.gcs_bucket_name}")
        return storage
