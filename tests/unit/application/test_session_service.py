"""
Unit tests for SessionService.
"""

import pytest

from fieldcrm.application import SessionService
from fieldcrm.domain.errors import PersistenceError
from fieldcrm.domain.identity import UserRole


@pytest.fixture
def service(store, tracker, clock):
    return SessionService(store, tracker, fallback_company_id="UNKNOWN_COMPANY", clock=clock)


class TestSignIn:
    """Test session creation from the users collection."""

    def test_profile_supplies_company(self, service, store, clock):
        store.seed("users", "u1", {
            "email": "sam@acme.com",
            "firstName": "Sam",
            "lastName": "Field",
            "companyId": "acme",
            "role": "CompanyAdmin",
        })

        session = service.sign_in("u1")

        assert session.company_id == "acme"
        assert session.profile.role is UserRole.COMPANY_ADMIN
        assert session.profile.full_name == "Sam Field"
        assert session.started_at == clock.now

    def test_missing_profile_uses_fallback_company(self, service):
        session = service.sign_in("ghost")
        assert session.profile is None
        assert session.company_id == "UNKNOWN_COMPANY"

    def test_store_failure(self, service, store, monkeypatch):
        def broken(collection, doc_id):
            raise TimeoutError("deadline exceeded")

        monkeypatch.setattr(store, "get", broken)

        with pytest.raises(PersistenceError):
            service.sign_in("u1")


class TestSignOut:
    """Test that signing out ends every live target."""

    def test_sign_out_releases_everything(self, service, tracker):
        session = service.sign_in("u1")
        tracker.activate("job-1")
        tracker.activate("draft-1")
        token = tracker.begin("job-1")

        service.sign_out(session)

        assert not tracker.is_current(token)
        assert not tracker.is_live("draft-1")
