"""
Integration tests for RedisDocumentStore against a live Redis.
"""

import json

import pytest

from fieldcrm.application import JobAggregate, JobService, OperationTracker
from fieldcrm.domain.document_store import DocumentQuery
from fieldcrm.domain.ledger import MoneyLedger
from fieldcrm.infrastructure import RedisDocumentStore

from tests.fixtures import make_job, make_session


@pytest.fixture
def store(redis_client):
    return RedisDocumentStore(redis_client, key_prefix="test")


class TestRedisDocumentStore:
    """Test document storage, partial merges and queries."""

    def test_put_creates_and_get_reads(self, store, redis_client):
        assert store.put("jobs", "job-1", {"status": "Lead", "payments": []})

        record = store.get("jobs", "job-1")

        assert record == {"id": "job-1", "status": "Lead", "payments": []}
        assert json.loads(redis_client.get("test:jobs:job-1"))["payments"] == []
        assert redis_client.sismember("test:jobs:_ids", "job-1")

    def test_put_merges_fields(self, store):
        store.put("jobs", "job-1", {"status": "Lead", "balance": 100})
        store.put("jobs", "job-1", {"balance": 40, "payments": [60]})

        assert store.get("jobs", "job-1") == {
            "id": "job-1", "status": "Lead", "balance": 40, "payments": [60],
        }

    def test_get_missing(self, store):
        assert store.get("jobs", "nope") is None

    def test_delete(self, store, redis_client):
        store.put("jobs", "job-1", {"status": "Lead"})

        assert store.delete("jobs", "job-1") is True
        assert store.get("jobs", "job-1") is None
        assert not redis_client.sismember("test:jobs:_ids", "job-1")
        assert store.delete("jobs", "job-1") is False

    def test_query_filters_and_orders(self, store):
        store.put("jobs", "a", {"companyId": "acme", "createdAt": 1})
        store.put("jobs", "b", {"companyId": "acme", "createdAt": 3})
        store.put("jobs", "c", {"companyId": "rival", "createdAt": 2})

        records = store.query(DocumentQuery(
            "jobs", where=(("companyId", "acme"),), order_by="createdAt", descending=True
        ))

        assert [r["id"] for r in records] == ["b", "a"]

    def test_subscribe_yields_after_change(self, store, redis_client):
        other = RedisDocumentStore(redis_client, key_prefix="test")
        feed = store.subscribe(DocumentQuery("jobs"))

        try:
            assert next(feed) == []
            other.put("jobs", "job-1", {"status": "Lead"})
            assert [r["id"] for r in next(feed)] == ["job-1"]
        finally:
            feed.close()


class TestJobsOnRedis:
    """Test the job services end to end on Redis."""

    def test_aggregate_partial_writes_survive_reload(self, store):
        job = make_job(ledger=MoneyLedger(contract_amount=5000, deposit_amount=1000))
        store.put("jobs", job.job_id, job.to_dict())
        service = JobService(store, OperationTracker())

        aggregate = service.open(job.job_id)
        aggregate.set_deposit_paid(True)
        aggregate.add_payment(2000)
        aggregate.update_details(job_name="Roof")

        reloaded = service.get(job.job_id)
        assert reloaded.ledger.balance == 2000
        assert reloaded.detail("job_name") == "Roof"
        assert reloaded.media == job.media

    def test_company_listing(self, store):
        for job in (make_job("j1"), make_job("j2", company_id="rival")):
            store.put("jobs", job.job_id, job.to_dict())

        jobs = JobService(store, OperationTracker()).list_jobs(make_session())

        assert [j.job_id for j in jobs] == ["j1"]

    def test_two_aggregates_merge_distinct_fields(self, store):
        job = make_job()
        store.put("jobs", job.job_id, job.to_dict())
        first = JobAggregate(job, store)
        second = JobAggregate(job, store)

        first.update_details(job_name="Roof")
        second.update_details(measurements="32 sq")

        record = store.get("jobs", job.job_id)
        assert (record["jobName"], record["measurements"]) == ("Roof", "32 sq")
