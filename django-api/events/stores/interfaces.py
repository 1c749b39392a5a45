"""Store interfaces (repository pattern).

Stores must be swappable. ``DocumentStore`` is the gateway to a keyed,
queryable, subscribable document collection: every single-document write is
atomic and bumps the document's version, but there is no cross-document
transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


class StoreError(Exception):
    """The backing store failed or could not be reached."""


class DocumentNotFoundError(StoreError):
    """An update targeted a document that does not exist."""

    def __init__(self, collection: str, key: str) -> None:
        super().__init__(f"{collection}/{key} does not exist")
        self.collection = collection
        self.key = key


class VersionConflictError(StoreError):
    """A conditional write saw a different version than expected."""

    def __init__(self, collection: str, key: str, expected: int, actual: int) -> None:
        super().__init__(
            f"{collection}/{key} is at version {actual}, expected {expected}"
        )
        self.collection = collection
        self.key = key
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class Document:
    """A committed document: its key, payload and write version."""

    key: str
    fields: dict[str, Any] = field(default_factory=dict)
    version: int = 1


Predicate = Callable[[Document], bool]
ChangeListener = Callable[[list[Document]], None]


class Subscription(ABC):
    """Handle returned by ``LiveQuery.subscribe``."""

    @property
    @abstractmethod
    def active(self) -> bool:
        ...

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop all further delivery. Safe to call more than once."""
        ...


class LiveQuery(ABC):
    """A query over one collection whose results are pushed on every change."""

    @abstractmethod
    def subscribe(self, on_change: ChangeListener) -> Subscription:
        """Deliver the current snapshot now and a fresh one after each commit."""
        ...


class DocumentStore(ABC):
    """Interface for document persistence operations."""

    @abstractmethod
    def get(self, collection: str, key: str) -> Document | None:
        """Return a document by key, or None if not found."""
        ...

    @abstractmethod
    def put(self, collection: str, key: str, fields: dict[str, Any]) -> Document:
        """Create or replace a document."""
        ...

    @abstractmethod
    def add(self, collection: str, fields: dict[str, Any]) -> Document:
        """Create a document under a store-assigned key."""
        ...

    @abstractmethod
    def update(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> Document:
        """Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            VersionConflictError: If expected_version is given and stale.
        """
        ...

    @abstractmethod
    def delete(self, collection: str, key: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""
        ...

    @abstractmethod
    def fetch(self, collection: str, predicate: Predicate | None = None) -> list[Document]:
        """Return the documents of a collection, oldest first."""
        ...

    @abstractmethod
    def query(self, collection: str, predicate: Predicate | None = None) -> LiveQuery:
        """Return a live query over a collection."""
        ...
