"""
Unit tests for the service factory wiring.
"""

from datetime import timedelta

from fieldcrm.application import create_services
from fieldcrm.config.settings import CrmConfig

from tests.fixtures import make_job


class TestCreateServices:
    """Test that services share one tracker and one publisher."""

    def test_services_share_collaborators(self, store, blobs, clock):
        services = create_services(document_store=store, blob_storage=blobs, clock=clock)

        assert services.jobs.tracker is services.tracker
        assert services.media.tracker is services.tracker
        assert services.leads.tracker is services.tracker
        assert services.jobs.publisher is services.publisher
        assert services.media.blob_storage is blobs

    def test_config_drives_fallback_company_and_grace_period(
        self, store, blobs, monkeypatch
    ):
        monkeypatch.setenv("CRM_DEFAULT_COMPANY", "HQ")
        monkeypatch.setenv("CRM_OVERDUE_DAYS", "9")

        services = create_services(CrmConfig(), document_store=store, blob_storage=blobs)

        assert services.sessions.sign_in("ghost").company_id == "HQ"
        assert services.jobs.overdue_after == timedelta(days=9)

    def test_closing_job_discards_upload_end_to_end(self, store, blobs, clock):
        """A job closed mid-upload keeps no record of the late upload."""
        services = create_services(
            document_store=store, blob_storage=blobs, clock=clock, log_events=False
        )
        store.seed("jobs", "job-1", make_job().to_dict())
        aggregate = services.jobs.open("job-1")
        blobs.on_upload = lambda path: services.jobs.close("job-1")

        assert services.media.upload_to_job(aggregate, "inspection", b"x") is None
        assert len(services.jobs.get("job-1").media) == 0

    def test_sign_out_closes_open_jobs(self, store, blobs):
        services = create_services(document_store=store, blob_storage=blobs, log_events=False)
        store.seed("jobs", "job-1", make_job().to_dict())
        session = services.sessions.sign_in("u1")
        services.jobs.open("job-1")

        services.sessions.sign_out(session)

        assert not services.tracker.is_live("job-1")
