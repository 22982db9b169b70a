"""
Session Application Service

Creates and tears down the explicit Session value. Authentication happens
outside this library; sign_in is called with an already verified user id.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from fieldcrm.domain import identity
from fieldcrm.domain.document_store import DocumentStore
from fieldcrm.domain.errors import PersistenceError
from fieldcrm.domain.identity import Session, UserProfile

from .operation_tracker import OperationTracker

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionService:
    """Application service for the signed-in session lifecycle."""

    def __init__(
        self,
        store: DocumentStore,
        tracker: OperationTracker,
        fallback_company_id: str = "UNKNOWN_COMPANY",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.tracker = tracker
        self.fallback_company_id = fallback_company_id
        self.clock = clock

    def sign_in(self, user_id: str) -> Session:
        """
        Build the session for an authenticated user.

        A user without a ``users`` record still gets a session; it acts for
        the fallback company.

        Raises:
            PersistenceError: If the profile cannot be read
        """
        try:
            record = self.store.get(identity.COLLECTION, user_id)
        except Exception as e:
            logger.error(f"Error loading profile for {user_id}: {e}")
            raise PersistenceError(
                f"Failed to load profile for {user_id}", original_error=e
            ) from e

        profile = None
        if record is None:
            logger.warning(f"No user profile for {user_id}; using {self.fallback_company_id}")
        else:
            profile = UserProfile.from_dict({**record, "id": record.get("id") or user_id})

        session = Session(
            user_id=user_id,
            profile=profile,
            fallback_company_id=self.fallback_company_id,
            started_at=self.clock(),
        )
        logger.info(f"Signed in {user_id} for company {session.company_id}")
        return session

    def sign_out(self, session: Session) -> None:
        """End the session; every open job and draft stops being live."""
        released = self.tracker.release_all()
        logger.info(f"Signed out {session.user_id}, released {released} open target(s)")
