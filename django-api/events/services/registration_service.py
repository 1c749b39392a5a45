"""Registration engine - joins and leaves events under the capacity invariant.

The attendee list lives on the shared event document; the registrant's own
Registration record is a second document. The two are written in that order
as a TwoPhaseWrite, so a failure between them is reported, never hidden.

The attendee write is conditional on the version of the event that was
checked, and the check is repeated when another writer got there first.
This keeps ``len(attendees) <= capacity`` even when many registrants race
for the last seats.
"""

import logging
from collections.abc import Callable

from events.domain import Event, EventId, Identity, Registration
from events.domain.errors import (
    AlreadyRegisteredError,
    EventFullError,
    EventNotFoundError,
    NotRegisteredError,
    RegistrationClosedError,
    WriteConflictError,
)
from events.services.base import HubContext, parse_event_id, store_errors
from events.services.two_phase import TwoPhaseWrite
from events.stores.interfaces import DocumentNotFoundError, VersionConflictError
from events.stores.repositories import EventRepository, RegistrationRepository

logger = logging.getLogger(__name__)

AttendeeChange = Callable[[Event], tuple[str, ...]]


class RegistrationService:
    """Service for registering identities to events and cancelling them."""

    def __init__(self, context: HubContext) -> None:
        self._events = EventRepository(context.store, context.app_id)
        self._registrations = RegistrationRepository(context.store, context.app_id)
        self._clock = context.clock
        self._tz = context.tz
        self._max_attempts = context.max_attempts

    def register(self, event_id: str, registrant: Identity) -> Registration:
        """Add ``registrant`` to the event's attendees and record it.

        Raises:
            InvalidEventIdError: If the event_id is not a valid key.
            EventNotFoundError: If the event does not exist.
            AlreadyRegisteredError: If registrant is already an attendee.
            RegistrationClosedError: If the event is not approved or has started.
            EventFullError: If every seat is taken.
            WriteConflictError: If concurrent writers kept winning.
            PartialWriteInconsistencyError: If the attendee list was updated but
                the Registration record could not be written.
            StoreUnavailableError: If the first write could not be made.
        """
        key = parse_event_id(event_id)

        def add_attendee(event: Event) -> tuple[str, ...]:
            if event.has_attendee(registrant.id):
                raise AlreadyRegisteredError(key.value)
            if not event.is_open_for_registration(self._clock(), self._tz):
                raise RegistrationClosedError(key.value)
            if event.is_full:
                raise EventFullError(key.value)
            return event.attendees + (registrant.id,)

        registration = Registration(
            event_id=key, identity_id=registrant.id, registered_at=self._clock()
        )
        TwoPhaseWrite(
            operation="register",
            event_id=key.value,
            identity_id=registrant.id,
            primary=lambda: self._change_attendees(key, add_attendee),
            secondary=lambda _: self._registrations.save_registration(registration),
        ).execute()
        logger.info("Registered identity=%s for event_id=%s", registrant.id, key)
        return registration

    def cancel(self, event_id: str, registrant: Identity) -> None:
        """Remove ``registrant`` from the event's attendees and drop the record.

        Raises:
            InvalidEventIdError: If the event_id is not a valid key.
            EventNotFoundError: If the event does not exist.
            NotRegisteredError: If registrant is not an attendee.
            WriteConflictError: If concurrent writers kept winning.
            PartialWriteInconsistencyError: If the attendee list was updated but
                the Registration record could not be deleted.
            StoreUnavailableError: If the first write could not be made.
        """
        key = parse_event_id(event_id)

        def remove_attendee(event: Event) -> tuple[str, ...]:
            if not event.has_attendee(registrant.id):
                raise NotRegisteredError(key.value)
            return tuple(a for a in event.attendees if a != registrant.id)

        TwoPhaseWrite(
            operation="cancel",
            event_id=key.value,
            identity_id=registrant.id,
            primary=lambda: self._change_attendees(key, remove_attendee),
            secondary=lambda _: self._registrations.delete_registration(
                registrant.id, key
            ),
        ).execute()
        logger.info("Cancelled identity=%s for event_id=%s", registrant.id, key)

    def _change_attendees(self, key: EventId, change: AttendeeChange) -> Event:
        """Compare-and-swap the attendee list, re-checking on every attempt."""
        for attempt in range(1, self._max_attempts + 1):
            event = self._events.get_event(key)
            if event is None:
                raise EventNotFoundError(key.value)
            attendees = change(event)
            try:
                return self._events.set_attendees(event, attendees)
            except VersionConflictError:
                logger.warning(
                    "Attendee write conflict event_id=%s attempt=%d/%d",
                    key,
                    attempt,
                    self._max_attempts,
                )
            except DocumentNotFoundError as exc:
                raise EventNotFoundError(key.value) from exc
        raise WriteConflictError(key.value)

    def list_registrations(self, identity: Identity) -> list[Registration]:
        """Return the identity's Registration records backed by attendee membership.

        Records of deleted events and records left by a partial cancel are
        skipped until ``prune_orphans`` or ``reconcile`` removes them.
        """
        listed = []
        with store_errors():
            for registration in self._registrations.list_registrations(identity.id):
                event = self._events.get_event(registration.event_id)
                if event is not None and event.has_attendee(identity.id):
                    listed.append(registration)
        return listed

    def prune_orphans(self, identity: Identity) -> list[EventId]:
        """Delete Registration records that reference deleted events."""
        pruned = []
        with store_errors():
            for registration in self._registrations.list_registrations(identity.id):
                if not self._events.event_exists(registration.event_id):
                    self._registrations.delete_registration(
                        identity.id, registration.event_id
                    )
                    pruned.append(registration.event_id)
        if pruned:
            logger.info(
                "Pruned %d orphaned registrations for identity=%s", len(pruned), identity.id
            )
        return pruned

    def reconcile(self, event_id: str, identity: Identity) -> Registration | None:
        """Make the Registration record agree with the event's attendee list.

        Repairs the state left behind by a PartialWriteInconsistencyError and
        returns the record that exists afterwards, if any.
        """
        key = parse_event_id(event_id)
        with store_errors():
            event = self._events.get_event(key)
            record = self._registrations.get_registration(identity.id, key)
            attending = event is not None and event.has_attendee(identity.id)
            if attending and record is None:
                record = Registration(
                    event_id=key, identity_id=identity.id, registered_at=self._clock()
                )
                self._registrations.save_registration(record)
                logger.info(
                    "Reconciled missing registration identity=%s event_id=%s",
                    identity.id,
                    key,
                )
            elif not attending and record is not None:
                self._registrations.delete_registration(identity.id, key)
                record = None
                logger.info(
                    "Reconciled stale registration identity=%s event_id=%s",
                    identity.id,
                    key,
                )
        return record
