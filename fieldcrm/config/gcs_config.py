"""
Google Cloud Storage Configuration

Manages GCS client initialization and configuration.
"""

import logging
import os
from typing import Optional

from google.auth.exceptions import DefaultCredentialsError
from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Global GCS client instance
_gcs_client: Optional[storage.Client] = None
_gcs_bucket: Optional[storage.Bucket] = None


def init_gcs(bucket_name: Optional[str] = None) -> bool:
    """
    Initialize Google Cloud Storage client.

    Args:
        bucket_name: Bucket to use; GCS_BUCKET_NAME when omitted

    Returns:
        True if initialization successful, False otherwise
    """
    global _gcs_client, _gcs_bucket

    bucket_name = bucket_name or os.getenv('GCS_BUCKET_NAME')
    credentials_path = os.getenv('GOOGLE_APPLICATION_CREDENTIALS')

    if not bucket_name:
        logger.warning("GCS_BUCKET_NAME not set, GCS integration disabled")
        return False

    try:
        if credentials_path and os.path.exists(credentials_path):
            credentials = service_account.Credentials.from_service_account_file(
                credentials_path
            )
            _gcs_client = storage.Client(credentials=credentials)
            logger.info(f"GCS client initialized with service account: {credentials_path}")
        else:
            _gcs_client = storage.Client()
            logger.info("GCS client initialized with default credentials")
    except (DefaultCredentialsError, ValueError, OSError) as e:
        logger.warning(f"Could not initialize GCS client: {e}")
        _gcs_client = None
        _gcs_bucket = None
        return False

    _gcs_bucket = _gcs_client.bucket(bucket_name)

    try:
        if not _gcs_bucket.exists():
            logger.warning(f"GCS bucket '{bucket_name}' does not exist")
            _gcs_bucket = None
            return False
    except GoogleCloudError as e:
        # bucket might exist but we lack permission to check
        logger.warning(f"Could not verify bucket existence: {e}")

    logger.info(f"GCS initialized successfully with bucket: {bucket_name}")
    return True


def get_gcs_client() -> Optional[storage.Client]:
    """
    Get the GCS client instance.

    Returns:
        GCS client or None if not initialized
    """
    return _gcs_client


def get_gcs_bucket() -> Optional[storage.Bucket]:
    """
    Get the GCS bucket instance.

    Returns:
        GCS bucket or None if not initialized
    """
    return _gcs_bucket


def is_gcs_enabled() -> bool:
    """
    Check if GCS integration is enabled and configured.

    Returns:
        True if GCS is available, False otherwise
    """
    return _gcs_client is not None and _gcs_bucket is not None


def gcs_health_check() -> bool:
    """
    Perform health check on GCS connection.

    Returns:
        True if GCS is healthy, False otherwise
    """
    if not is_gcs_enabled():
        return False

    try:
        return _gcs_bucket.exists()
    except GoogleCloudError as e:
        logger.warning(f"GCS health check failed: {e}")
        return False
