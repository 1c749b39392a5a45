"""Event service - creation, editing and deletion of events.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import dataclasses
import logging
from typing import Any

from events.domain import Capacity, Event, EventDraft, Identity
from events.domain.errors import (
    EventNotFoundError,
    InvalidEventError,
    UnauthorizedError,
    WriteConflictError,
)
from events.services.base import HubContext, parse_event_id, store_errors
from events.services.profile_service import ProfileResolver
from events.stores.interfaces import DocumentNotFoundError, VersionConflictError
from events.stores.repositories import EventRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(field.name for field in dataclasses.fields(EventDraft))


def validate_draft(draft: EventDraft) -> None:
    """Raise InvalidEventError unless every field is set and capacity is positive."""
    try:
        Capacity(draft.capacity)
    except ValueError as exc:
        raise InvalidEventError(
            "All fields are required and capacity must be greater than 0."
        ) from exc
    if draft.missing_fields():
        raise InvalidEventError(
            "All fields are required and capacity must be greater than 0."
        )


def draft_of(event: Event) -> EventDraft:
    return EventDraft(
        title=event.title,
        description=event.description,
        date=event.date,
        time=event.time,
        location=event.location,
        capacity=event.capacity.value,
    )


class EventService:
    """Service for event catalog operations."""

    def __init__(self, context: HubContext, profiles: ProfileResolver | None = None) -> None:
        self._events = EventRepository(context.store, context.app_id)
        self._profiles = profiles or ProfileResolver(context)
        self._max_attempts = context.max_attempts

    def list_events(self) -> list[Event]:
        """Return all events, whatever their status."""
        with store_errors():
            return self._events.list_events()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid key.
            EventNotFoundError: If the event does not exist.
        """
        key = parse_event_id(event_id)
        with store_errors():
            event = self._events.get_event(key)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def create_event(self, creator: Identity, draft: EventDraft) -> Event:
        """Create a pending event with no attendees, owned by ``creator``."""
        validate_draft(draft)
        with store_errors():
            event = self._events.create_event(draft, creator)
        logger.info("Event created event_id=%s creator=%s", event.id, creator.id)
        return event

    def update_event(self, event_id: str, editor: Identity, **changes: Any) -> Event:
        """Apply field edits on behalf of the event's creator.

        Raises:
            EventNotFoundError: If the event does not exist.
            UnauthorizedError: If ``editor`` did not create the event.
            InvalidEventError: If a field is not editable, the result is
                incomplete, or capacity drops below the attendee count.
        """
        not_editable = sorted(set(changes) - EDITABLE_FIELDS)
        if not_editable:
            raise InvalidEventError(f"Fields cannot be edited: {', '.join(not_editable)}")
        key = parse_event_id(event_id)

        with store_errors():
            for attempt in range(1, self._max_attempts + 1):
                event = self._events.get_event(key)
                if event is None:
                    raise EventNotFoundError(event_id)
                if event.creator_id != editor.id:
                    logger.warning(
                        "Rejected edit of event_id=%s by identity=%s", event_id, editor.id
                    )
                    raise UnauthorizedError("edit this event")
                draft = dataclasses.replace(draft_of(event), **changes)
                validate_draft(draft)
                if draft.capacity < len(event.attendees):
                    raise InvalidEventError(
                        "Capacity cannot be lower than the current number of attendees."
                    )
                try:
                    updated = self._events.update_details(event, draft)
                except VersionConflictError:
                    logger.warning(
                        "Edit conflict event_id=%s attempt=%d/%d",
                        event_id,
                        attempt,
                        self._max_attempts,
                    )
                    continue
                except DocumentNotFoundError as exc:
                    raise EventNotFoundError(event_id) from exc
                logger.info("Event updated event_id=%s", event_id)
                return updated
        raise WriteConflictError(event_id)

    def delete_event(self, event_id: str, actor: Identity) -> None:
        """Delete an event as its creator or as an admin.

        Registration records referencing the event are left in place; see
        RegistrationService.prune_orphans.
        """
        key = parse_event_id(event_id)
        with store_errors():
            event = self._events.get_event(key)
            if event is None:
                raise EventNotFoundError(event_id)
            if event.creator_id != actor.id and not self._profiles.resolve(actor).is_admin:
                logger.warning(
                    "Rejected delete of event_id=%s by identity=%s", event_id, actor.id
                )
                raise UnauthorizedError("delete this event")
            self._events.delete_event(key)
        logger.info("Event deleted event_id=%s by identity=%s", event_id, actor.id)
