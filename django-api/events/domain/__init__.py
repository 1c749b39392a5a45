from events.domain.models import Event, EventDraft, Identity, Profile, Registration
from events.domain.value_objects import Capacity, EventId, EventStatus

__all__ = [
    "Event",
    "EventDraft",
    "Identity",
    "Profile",
    "Registration",
    "EventId",
    "EventStatus",
    "Capacity",
]
