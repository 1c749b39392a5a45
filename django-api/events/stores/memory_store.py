"""In-process implementation of the DocumentStore.

Used by unit tests, and by single-process deployments that point
``EVENTS_HUB["STORE_BACKEND"]`` here. Writes are serialized by a lock;
subscribers are notified synchronously after each write, outside the lock,
in subscription order. Every write is also announced on ``document_changed``
so cached event reads are invalidated as with the database store.
"""

import copy
import logging
import threading
import uuid
from collections import defaultdict
from typing import Any

from events.signals import document_changed
from events.stores.interfaces import (
    ChangeListener,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    LiveQuery,
    Predicate,
    Subscription,
    VersionConflictError,
)

logger = logging.getLogger(__name__)


class _MemorySubscription(Subscription):
    def __init__(
        self,
        store: "InMemoryDocumentStore",
        collection: str,
        predicate: Predicate | None,
        on_change: ChangeListener,
    ) -> None:
        self._store = store
        self._collection = collection
        self._predicate = predicate
        self._on_change = on_change
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self) -> None:
        if not self._active:
            return
        snapshot = self._store.fetch(self._collection, self._predicate)
        try:
            self._on_change(snapshot)
        except Exception:
            logger.exception(
                "Change listener failed for collection=%s", self._collection
            )

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._detach(self._collection, self)


class _MemoryLiveQuery(LiveQuery):
    def __init__(
        self,
        store: "InMemoryDocumentStore",
        collection: str,
        predicate: Predicate | None,
    ) -> None:
        self._store = store
        self._collection = collection
        self._predicate = predicate

    def subscribe(self, on_change: ChangeListener) -> Subscription:
        subscription = _MemorySubscription(
            self._store, self._collection, self._predicate, on_change
        )
        self._store._attach(self._collection, subscription)
        subscription.deliver()
        return subscription


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed document store with live queries."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self._subscriptions: dict[str, list[_MemorySubscription]] = defaultdict(list)

    def get(self, collection: str, key: str) -> Document | None:
        with self._lock:
            document = self._collections[collection].get(key)
            return _copy(document) if document else None

    def put(self, collection: str, key: str, fields: dict[str, Any]) -> Document:
        with self._lock:
            existing = self._collections[collection].get(key)
            version = existing.version + 1 if existing else 1
            document = Document(key=key, fields=copy.deepcopy(fields), version=version)
            self._collections[collection][key] = document
        self._publish(collection, key)
        return _copy(document)

    def add(self, collection: str, fields: dict[str, Any]) -> Document:
        return self.put(collection, uuid.uuid4().hex, fields)

    def update(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> Document:
        with self._lock:
            existing = self._collections[collection].get(key)
            if existing is None:
                raise DocumentNotFoundError(collection, key)
            if expected_version is not None and existing.version != expected_version:
                raise VersionConflictError(
                    collection, key, expected_version, existing.version
                )
            merged = {**existing.fields, **copy.deepcopy(fields)}
            document = Document(key=key, fields=merged, version=existing.version + 1)
            self._collections[collection][key] = document
        self._publish(collection, key)
        return _copy(document)

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            removed = self._collections[collection].pop(key, None)
        if removed is not None:
            self._publish(collection, key)

    def fetch(self, collection: str, predicate: Predicate | None = None) -> list[Document]:
        with self._lock:
            documents = [_copy(doc) for doc in self._collections[collection].values()]
        if predicate is None:
            return documents
        return [doc for doc in documents if predicate(doc)]

    def query(self, collection: str, predicate: Predicate | None = None) -> LiveQuery:
        return _MemoryLiveQuery(self, collection, predicate)

    def subscriber_count(self, collection: str) -> int:
        with self._lock:
            return len(self._subscriptions[collection])

    def _attach(self, collection: str, subscription: _MemorySubscription) -> None:
        with self._lock:
            self._subscriptions[collection].append(subscription)

    def _detach(self, collection: str, subscription: _MemorySubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions[collection]:
                self._subscriptions[collection].remove(subscription)

    def _publish(self, collection: str, key: str) -> None:
        document_changed.send(sender=type(self), collection=collection, key=key)
        with self._lock:
            subscriptions = list(self._subscriptions[collection])
        for subscription in subscriptions:
            subscription.deliver()


def _copy(document: Document) -> Document:
    return Document(
        key=document.key,
        fields=copy.deepcopy(document.fields),
        version=document.version,
    )
