"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Document mapping lives in events/stores/repositories.py.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo

from events.domain.value_objects import Capacity, EventId, EventStatus

ANONYMOUS_EMAIL = "anonymous"


@dataclass(frozen=True)
class Identity:
    """An authenticated caller."""

    id: str
    email: str | None = None

    @property
    def display_email(self) -> str:
        return self.email or ANONYMOUS_EMAIL


@dataclass(frozen=True)
class Profile:
    """Per-identity profile record. ``is_admin`` is only ever set out-of-band."""

    identity_id: str
    email: str
    is_admin: bool = False


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    date: date
    time: time
    location: str
    capacity: Capacity
    status: EventStatus
    creator_id: str
    creator_email: str
    attendees: tuple[str, ...] = ()
    version: int = 1

    @property
    def is_full(self) -> bool:
        return len(self.attendees) >= self.capacity.value

    @property
    def seats_left(self) -> int:
        return max(self.capacity.value - len(self.attendees), 0)

    def has_attendee(self, identity_id: str) -> bool:
        return identity_id in self.attendees

    def starts_at(self, tz: tzinfo = timezone.utc) -> datetime:
        return datetime.combine(self.date, self.time, tzinfo=tz)

    def is_past(self, now: datetime, tz: tzinfo = timezone.utc) -> bool:
        return self.starts_at(tz) < now

    def is_open_for_registration(self, now: datetime, tz: tzinfo = timezone.utc) -> bool:
        return self.status is EventStatus.APPROVED and not self.is_past(now, tz)


@dataclass(frozen=True)
class EventDraft:
    """Editable fields of an event, as submitted by its creator."""

    title: str
    description: str
    date: date
    time: time
    location: str
    capacity: int

    def missing_fields(self) -> list[str]:
        missing = []
        for name in ("title", "description", "date", "time", "location"):
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


@dataclass(frozen=True)
class Registration:
    """A registrant's personal record of having joined an event."""

    event_id: EventId
    identity_id: str
    registered_at: datetime
