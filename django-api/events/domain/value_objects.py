"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class EventId:
    """Opaque store-assigned key of an Event."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or "/" in self.value:
            raise ValueError("Event ID must be a non-empty key without '/'")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Capacity:
    """Positive integer representing the number of seats of an event."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Capacity must be an integer")
        if self.value <= 0:
            raise ValueError("Capacity must be greater than 0")


class EventStatus(Enum):
    """Moderation status of an event."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition_to(self, target: "EventStatus") -> bool:
        return self is EventStatus.PENDING and target is not EventStatus.PENDING
