"""Repositories mapping hub documents to domain models.

Repositories know collection paths and field names; they never enforce
business rules and let store errors propagate to the services.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

from events.domain import (
    Capacity,
    Event,
    EventDraft,
    EventId,
    EventStatus,
    Identity,
    Profile,
    Registration,
)
from events.domain.models import ANONYMOUS_EMAIL
from events.stores.interfaces import Document, DocumentStore, Subscription
from events.stores.paths import (
    PROFILE_KEY,
    events_collection,
    registrations_collection,
    user_collection,
)

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"


def event_from_document(document: Document) -> Event:
    fields = document.fields
    return Event(
        id=EventId(document.key),
        title=fields.get("title", ""),
        description=fields.get("description", ""),
        date=date.fromisoformat(fields["date"]),
        time=time.fromisoformat(fields["time"]),
        location=fields.get("location", ""),
        capacity=Capacity(int(fields["capacity"])),
        status=EventStatus(fields.get("status", EventStatus.PENDING.value)),
        creator_id=fields.get("creatorId", ""),
        creator_email=fields.get("creatorEmail", ANONYMOUS_EMAIL),
        attendees=tuple(dict.fromkeys(fields.get("attendees") or [])),
        version=document.version,
    )


def draft_to_fields(draft: EventDraft) -> dict[str, Any]:
    return {
        "title": draft.title,
        "description": draft.description,
        "date": draft.date.isoformat(),
        "time": draft.time.strftime(TIME_FORMAT),
        "location": draft.location,
        "capacity": draft.capacity,
    }


def _parse_events(documents: list[Document]) -> list[Event]:
    events = []
    for document in documents:
        try:
            events.append(event_from_document(document))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed event document key=%s", document.key)
    return events


class EventRepository:
    """CRUD over Event documents in the shared event collection."""

    def __init__(self, store: DocumentStore, app_id: str) -> None:
        self._store = store
        self.collection = events_collection(app_id)

    def get_event(self, event_id: EventId) -> Event | None:
        document = self._store.get(self.collection, event_id.value)
        if document is None:
            return None
        parsed = _parse_events([document])
        return parsed[0] if parsed else None

    def event_exists(self, event_id: EventId) -> bool:
        return self._store.get(self.collection, event_id.value) is not None

    def list_events(self) -> list[Event]:
        return _parse_events(self._store.fetch(self.collection))

    def create_event(self, draft: EventDraft, creator: Identity) -> Event:
        document = self._store.add(
            self.collection,
            {
                **draft_to_fields(draft),
                "creatorId": creator.id,
                "creatorEmail": creator.display_email,
                "status": EventStatus.PENDING.value,
                "attendees": [],
            },
        )
        return event_from_document(document)

    def update_details(self, event: Event, draft: EventDraft) -> Event:
        document = self._store.update(
            self.collection,
            event.id.value,
            draft_to_fields(draft),
            expected_version=event.version,
        )
        return event_from_document(document)

    def set_attendees(self, event: Event, attendees: tuple[str, ...]) -> Event:
        document = self._store.update(
            self.collection,
            event.id.value,
            {"attendees": list(attendees)},
            expected_version=event.version,
        )
        return event_from_document(document)

    def set_status(self, event: Event, status: EventStatus) -> Event:
        document = self._store.update(
            self.collection,
            event.id.value,
            {"status": status.value},
            expected_version=event.version,
        )
        return event_from_document(document)

    def delete_event(self, event_id: EventId) -> None:
        self._store.delete(self.collection, event_id.value)

    def subscribe(self, on_change: Callable[[list[Event]], None]) -> Subscription:
        """Push the parsed event list on subscribe and after every change."""
        return self._store.query(self.collection).subscribe(
            lambda documents: on_change(_parse_events(documents))
        )


class RegistrationRepository:
    """Per-identity Registration records, keyed by event id."""

    def __init__(self, store: DocumentStore, app_id: str) -> None:
        self._store = store
        self._app_id = app_id

    def _collection(self, identity_id: str) -> str:
        return registrations_collection(self._app_id, identity_id)

    @staticmethod
    def _from_document(identity_id: str, document: Document) -> Registration:
        return Registration(
            event_id=EventId(document.fields.get("eventId", document.key)),
            identity_id=identity_id,
            registered_at=datetime.fromisoformat(document.fields["registeredAt"]),
        )

    def get_registration(self, identity_id: str, event_id: EventId) -> Registration | None:
        document = self._store.get(self._collection(identity_id), event_id.value)
        return self._from_document(identity_id, document) if document else None

    def list_registrations(self, identity_id: str) -> list[Registration]:
        return [
            self._from_document(identity_id, document)
            for document in self._store.fetch(self._collection(identity_id))
        ]

    def save_registration(self, registration: Registration) -> None:
        self._store.put(
            self._collection(registration.identity_id),
            registration.event_id.value,
            {
                "eventId": registration.event_id.value,
                "registeredAt": registration.registered_at.isoformat(),
            },
        )

    def delete_registration(self, identity_id: str, event_id: EventId) -> None:
        self._store.delete(self._collection(identity_id), event_id.value)


class ProfileRepository:
    """The single profile record stored under each identity."""

    def __init__(self, store: DocumentStore, app_id: str) -> None:
        self._store = store
        self._app_id = app_id

    def get_profile(self, identity_id: str) -> Profile | None:
        document = self._store.get(user_collection(self._app_id, identity_id), PROFILE_KEY)
        if document is None:
            return None
        return Profile(
            identity_id=identity_id,
            email=document.fields.get("email", ANONYMOUS_EMAIL),
            is_admin=document.fields.get("isAdmin") is True,
        )

    def save_profile(self, profile: Profile) -> None:
        self._store.put(
            user_collection(self._app_id, profile.identity_id),
            PROFILE_KEY,
            {"email": profile.email, "isAdmin": profile.is_admin},
        )
