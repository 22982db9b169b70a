"""
Unit tests for GCSBlobStorage and StorageFactory with a mocked client.
"""

from unittest.mock import MagicMock, patch

import pytest
from google.cloud.exceptions import GoogleCloudError, NotFound

from fieldcrm.config.settings import CrmConfig
from fieldcrm.domain.errors import StorageError
from fieldcrm.infrastructure import LocalBlobStorage, StorageFactory
from fieldcrm.infrastructure.gcs_blob_storage import GCSBlobStorage


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def storage(client):
    return GCSBlobStorage("crm-media", client=client, timeout=5)


def blob_of(client):
    return client.bucket.return_value.blob.return_value


class TestGCSBlobStorage:
    """Test GCS blob operations."""

    def test_upload_returns_gs_url(self, storage, client):
        url = storage.upload("acme/job-1/install/abc", b"jpeg")

        assert url == "gs://crm-media/acme/job-1/install/abc"
        client.bucket.return_value.blob.assert_called_with("acme/job-1/install/abc")
        blob_of(client).upload_from_string.assert_called_once_with(b"jpeg", timeout=5)

    def test_upload_failure(self, storage, client):
        blob_of(client).upload_from_string.side_effect = GoogleCloudError("quota")
        with pytest.raises(StorageError):
            storage.upload("acme/job-1/install/abc", b"jpeg")

    def test_delete_missing_blob_succeeds(self, storage, client):
        blob_of(client).delete.side_effect = NotFound("gone")
        assert storage.delete("gs://crm-media/acme/job-1/install/abc") is True

    def test_delete_failure_returns_false(self, storage, client):
        blob_of(client).delete.side_effect = GoogleCloudError("denied")
        assert storage.delete("gs://crm-media/acme/job-1/install/abc") is False

    def test_download(self, storage, client):
        blob_of(client).download_as_bytes.return_value = b"pdf"
        assert storage.download("gs://crm-media/acme/job-1/document/abc") == b"pdf"

    def test_download_missing(self, storage, client):
        blob_of(client).download_as_bytes.side_effect = NotFound("gone")
        with pytest.raises(StorageError):
            storage.download("gs://crm-media/acme/job-1/document/abc")

    def test_url_from_other_bucket(self, storage):
        with pytest.raises(StorageError):
            storage.download("gs://other/acme/job-1/document/abc")

    def test_signed_url(self, storage, client):
        blob_of(client).generate_signed_url.return_value = "https://signed"
        assert storage.generate_signed_url("gs://crm-media/a/b/install/c") == "https://signed"

    def test_empty_bucket_name(self, client):
        with pytest.raises(ValueError):
            GCSBlobStorage(" ", client=client)


class TestStorageFactory:
    """Test backend selection."""

    def test_local_without_bucket(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GCS_BUCKET_NAME", raising=False)
        monkeypatch.setenv("CRM_BLOB_DIR", str(tmp_path))

        assert isinstance(StorageFactory.create_storage(CrmConfig()), LocalBlobStorage)

    def test_gcs_when_bucket_reachable(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GCS_BUCKET_NAME", "crm-media")
        monkeypatch.setenv("CRM_BLOB_DIR", str(tmp_path))

        with patch("fieldcrm.infrastructure.storage_factory.init_gcs", return_value=True), \
                patch("fieldcrm.infrastructure.storage_factory.get_gcs_client",
                      return_value=MagicMock()):
            storage = StorageFactory.create_storage(CrmConfig())

        assert isinstance(storage, GCSBlobStorage)

    def test_falls_back_to_local_when_gcs_fails(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GCS_BUCKET_NAME", "crm-media")
        monkeypatch.setenv("CRM_BLOB_DIR", str(tmp_path))

        with patch("fieldcrm.infrastructure.storage_factory.init_gcs", return_value=False):
            storage = StorageFactory.create_storage(CrmConfig())

        assert isinstance(storage, LocalBlobStorage)
