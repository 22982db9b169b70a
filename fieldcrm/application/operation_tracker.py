"""
Operation Tracker

Liveness tokens for in-flight storage operations. A screen opening a job
(or a draft lead) activates its id; leaving releases it. Every slow
operation takes a token when it starts and checks it when its result
arrives, so results for released ids are dropped instead of applied.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Dict

from fieldcrm.domain.errors import StaleOperationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationToken:
    """
    Tag carried by one in-flight operation.

    Attributes:
        target_id: Job or draft id the operation targets
        generation: Activation generation the token was issued under
    """
    target_id: str
    generation: int


class OperationTracker:
    """
    Tracks which targets are live.

    Each activation of an id gets a new generation, so a token issued
    before a release stays stale even if the same id is opened again.
    """

    def __init__(self):
        self._live: Dict[str, int] = {}
        self._generation = 0
        self._lock = Lock()

    def activate(self, target_id: str) -> None:
        with self._lock:
            self._generation += 1
            self._live[target_id] = self._generation
        logger.debug(f"Activated {target_id} (generation {self._generation})")

    def release(self, target_id: str) -> None:
        with self._lock:
            released = self._live.pop(target_id, None)
        if released is not None:
            logger.debug(f"Released {target_id}")

    def release_all(self) -> int:
        """
        Release every live target.

        Returns:
            Number of targets released
        """
        with self._lock:
            count = len(self._live)
            self._live.clear()
        logger.debug(f"Released {count} live target(s)")
        return count

    def is_live(self, target_id: str) -> bool:
        with self._lock:
            return target_id in self._live

    def begin(self, target_id: str) -> OperationToken:
        """
        Issue a token for an operation about to start.

        Raises:
            StaleOperationError: If target_id is not live
        """
        with self._lock:
            generation = self._live.get(target_id)
        if generation is None:
            raise StaleOperationError(f"{target_id} is not open")
        return OperationToken(target_id, generation)

    def is_current(self, token: OperationToken) -> bool:
        """Whether the token's target is still live under the same activation."""
        with self._lock:
            return self._live.get(token.target_id) == token.generation
