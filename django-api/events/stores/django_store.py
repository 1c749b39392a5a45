"""Django ORM implementation of the DocumentStore.

Each document is one row of ``events.Document``. Writes take a row lock
inside a transaction so that the version check and the merge are atomic;
live queries are fed by ``events.signals.document_changed``, which fires
only after the writing transaction commits.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from django.db import DatabaseError, transaction

from events.models import Document as DocumentRow
from events.signals import document_changed
from events.stores.interfaces import (
    ChangeListener,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    LiveQuery,
    Predicate,
    StoreError,
    Subscription,
    VersionConflictError,
)

logger = logging.getLogger(__name__)


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except DatabaseError as exc:
        raise StoreError(str(exc)) from exc


def _to_document(row: DocumentRow) -> Document:
    return Document(key=row.key, fields=dict(row.data), version=row.version)


class _DjangoSubscription(Subscription):
    def __init__(
        self,
        store: "DjangoDocumentStore",
        collection: str,
        predicate: Predicate | None,
        on_change: ChangeListener,
    ) -> None:
        self._store = store
        self._collection = collection
        self._predicate = predicate
        self._on_change = on_change
        self._dispatch_uid = f"live-query-{uuid.uuid4().hex}"
        self._active = True
        document_changed.connect(
            self._handle_change,
            sender=DocumentRow,
            weak=False,
            dispatch_uid=self._dispatch_uid,
        )

    @property
    def active(self) -> bool:
        return self._active

    def _handle_change(self, sender, collection, key, **kwargs) -> None:
        if collection == self._collection:
            self.deliver()

    def deliver(self) -> None:
        if not self._active:
            return
        try:
            snapshot = self._store.fetch(self._collection, self._predicate)
            self._on_change(snapshot)
        except Exception:
            logger.exception(
                "Change listener failed for collection=%s", self._collection
            )

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        document_changed.disconnect(
            sender=DocumentRow, dispatch_uid=self._dispatch_uid
        )


class _DjangoLiveQuery(LiveQuery):
    def __init__(
        self,
        store: "DjangoDocumentStore",
        collection: str,
        predicate: Predicate | None,
    ) -> None:
        self._store = store
        self._collection = collection
        self._predicate = predicate

    def subscribe(self, on_change: ChangeListener) -> Subscription:
        subscription = _DjangoSubscription(
            self._store, self._collection, self._predicate, on_change
        )
        subscription.deliver()
        return subscription


class DjangoDocumentStore(DocumentStore):
    """Database-backed document store using Django ORM."""

    def get(self, collection: str, key: str) -> Document | None:
        with _database_errors():
            row = DocumentRow.objects.filter(collection=collection, key=key).first()
        return _to_document(row) if row else None

    def put(self, collection: str, key: str, fields: dict[str, Any]) -> Document:
        with _database_errors(), transaction.atomic():
            row = (
                DocumentRow.objects.select_for_update()
                .filter(collection=collection, key=key)
                .first()
            )
            if row is None:
                row = DocumentRow.objects.create(
                    collection=collection, key=key, data=fields
                )
            else:
                row.data = fields
                row.version += 1
                row.save(update_fields=["data", "version", "updated_at"])
        return _to_document(row)

    def add(self, collection: str, fields: dict[str, Any]) -> Document:
        with _database_errors():
            row = DocumentRow.objects.create(
                collection=collection, key=uuid.uuid4().hex, data=fields
            )
        return _to_document(row)

    def update(
        self,
        collection: str,
        key: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> Document:
        with _database_errors(), transaction.atomic():
            row = (
                DocumentRow.objects.select_for_update()
                .filter(collection=collection, key=key)
                .first()
            )
            if row is None:
                raise DocumentNotFoundError(collection, key)
            if expected_version is not None and row.version != expected_version:
                raise VersionConflictError(
                    collection, key, expected_version, row.version
                )
            row.data = {**row.data, **fields}
            row.version += 1
            row.save(update_fields=["data", "version", "updated_at"])
        return _to_document(row)

    def delete(self, collection: str, key: str) -> None:
        with _database_errors():
            DocumentRow.objects.filter(collection=collection, key=key).delete()

    def fetch(self, collection: str, predicate: Predicate | None = None) -> list[Document]:
        with _database_errors():
            rows = list(
                DocumentRow.objects.filter(collection=collection).order_by(
                    "created_at", "id"
                )
            )
        documents = [_to_document(row) for row in rows]
        if predicate is None:
            return documents
        return [doc for doc in documents if predicate(doc)]

    def query(self, collection: str, predicate: Predicate | None = None) -> LiveQuery:
        return _DjangoLiveQuery(self, collection, predicate)
