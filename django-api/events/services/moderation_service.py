"""Moderation state machine: pending events are approved or rejected by admins.

    pending --approve--> approved
    pending --reject---> rejected

Any other request leaves the event untouched. Admin rights are re-read from
the caller's profile on every call.
"""

import logging

from events.domain import Event, EventStatus, Identity
from events.domain.errors import (
    EventNotFoundError,
    UnauthorizedError,
    WriteConflictError,
)
from events.services.base import HubContext, parse_event_id, store_errors
from events.services.profile_service import ProfileResolver
from events.stores.interfaces import DocumentNotFoundError, VersionConflictError
from events.stores.repositories import EventRepository

logger = logging.getLogger(__name__)


class ModerationService:
    """Service for admin approval of events."""

    def __init__(self, context: HubContext, profiles: ProfileResolver | None = None) -> None:
        self._events = EventRepository(context.store, context.app_id)
        self._profiles = profiles or ProfileResolver(context)
        self._max_attempts = context.max_attempts

    def approve(self, event_id: str, actor: Identity) -> Event:
        return self._decide(event_id, actor, EventStatus.APPROVED, "approve events")

    def reject(self, event_id: str, actor: Identity) -> Event:
        return self._decide(event_id, actor, EventStatus.REJECTED, "reject events")

    def _decide(
        self, event_id: str, actor: Identity, target: EventStatus, action: str
    ) -> Event:
        key = parse_event_id(event_id)
        with store_errors():
            if not self._profiles.resolve(actor).is_admin:
                logger.warning(
                    "Rejected %s of event_id=%s by non-admin identity=%s",
                    target.value,
                    event_id,
                    actor.id,
                )
                raise UnauthorizedError(action)

            for attempt in range(1, self._max_attempts + 1):
                event = self._events.get_event(key)
                if event is None:
                    raise EventNotFoundError(event_id)
                if not event.status.can_transition_to(target):
                    logger.info(
                        "Event event_id=%s already %s, %s ignored",
                        event_id,
                        event.status.value,
                        target.value,
                    )
                    return event
                try:
                    updated = self._events.set_status(event, target)
                except VersionConflictError:
                    logger.warning(
                        "Moderation conflict event_id=%s attempt=%d/%d",
                        event_id,
                        attempt,
                        self._max_attempts,
                    )
                    continue
                except DocumentNotFoundError as exc:
                    raise EventNotFoundError(event_id) from exc
                logger.info(
                    "Event event_id=%s %s by identity=%s", event_id, target.value, actor.id
                )
                return updated
        raise WriteConflictError(event_id)
