"""
Document Store Repository Interface

Abstract interface for the hosted document database holding customers,
jobs and users. Writes are partial-field merges; a write never replaces a
whole document. The store is last-write-wins per field: two sessions
writing the same field concurrently race, and the later write is kept.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class DocumentQuery:
    """
    Equality-filtered, optionally ordered query over one collection.

    Attributes:
        collection: Collection name (``customers``, ``jobs``, ``users``)
        where: ``(field, value)`` pairs that must all be equal
        order_by: Field to sort by, or None for store order
        descending: Sort direction
    """

    collection: str
    where: Tuple[Tuple[str, Any], ...] = ()
    order_by: Optional[str] = None
    descending: bool = False

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(record.get(name) == value for name, value in self.where)

    def sort(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if self.order_by is None:
            return records
        # records missing the sort field sort first ascending, last descending
        return sorted(
            records,
            key=lambda r: (r.get(self.order_by) is not None, r.get(self.order_by) or 0),
            reverse=self.descending,
        )


class DocumentStore(ABC):
    """
    Interface for document persistence.

    Contract Guarantees:
    - get() returns None for a missing document (no exception)
    - returned records always carry their document id under ``id``
    - put() merges ``fields`` into the document, creating it if absent
    - put() reports failure by returning False or raising; callers treat
      both as a failed write
    - subscribe() yields the full matching record set once immediately and
      again after every change; the iterator never ends on its own and a
      fresh call starts a fresh subscription
    """

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a document.

        Args:
            collection: Collection name
            doc_id: Document id

        Returns:
            Document fields if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def put(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        """
        Merge ``fields`` into a document.

        Args:
            collection: Collection name
            doc_id: Document id
            fields: Top-level fields to set

        Returns:
            True if the write was applied, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def query(self, query: DocumentQuery) -> List[Dict[str, Any]]:
        """
        Run a query once.

        Returns:
            Matching documents, ordered as the query requests
        """
        pass  # pragma: no cover

    @abstractmethod
    def subscribe(self, query: DocumentQuery) -> Iterator[List[Dict[str, Any]]]:
        """
        Watch a query.

        Returns:
            Lazy, infinite iterator of record-set snapshots
        """
        pass  # pragma: no cover
