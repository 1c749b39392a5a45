"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_EVENT = "INVALID_EVENT"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    NOT_REGISTERED = "NOT_REGISTERED"
    EVENT_FULL = "EVENT_FULL"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    UNAUTHORIZED = "UNAUTHORIZED"
    WRITE_CONFLICT = "WRITE_CONFLICT"
    PARTIAL_WRITE_INCONSISTENCY = "PARTIAL_WRITE_INCONSISTENCY"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found.",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class InvalidEventError(DomainError):
    """Raised when submitted event fields break an event invariant."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EVENT, message=message)


class AlreadyRegisteredError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="You are already registered for this event.",
        )
        self.event_id = event_id


class NotRegisteredError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_REGISTERED,
            message="You are not registered for this event.",
        )
        self.event_id = event_id


class EventFullError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_FULL,
            message="This event is full.",
        )
        self.event_id = event_id


class RegistrationClosedError(DomainError):
    """Raised when registering for an event that is not approved or already started."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CLOSED,
            message="Registration is not open for this event.",
        )
        self.event_id = event_id


class UnauthorizedError(DomainError):
    """Raised when the caller lacks the rights for an action."""

    def __init__(self, action: str) -> None:
        super().__init__(
            code=ErrorCode.UNAUTHORIZED,
            message=f"You are not authorized to {action}.",
        )
        self.action = action


class WriteConflictError(DomainError):
    """Raised when a conditional write keeps losing to concurrent writers."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.WRITE_CONFLICT,
            message="The event is changing too quickly. Please try again.",
        )
        self.event_id = event_id


class PartialWriteInconsistencyError(DomainError):
    """Raised when the second of two paired writes failed after the first succeeded.

    The event document already reflects the change; the registrant's personal
    record does not. Carries enough context to reconcile the pair later.
    """

    def __init__(self, operation: str, event_id: str, identity_id: str) -> None:
        super().__init__(
            code=ErrorCode.PARTIAL_WRITE_INCONSISTENCY,
            message=(
                f"The event was updated but your registration record could not be "
                f"{'removed' if operation == 'cancel' else 'saved'}."
            ),
        )
        self.operation = operation
        self.event_id = event_id
        self.identity_id = identity_id


class StoreUnavailableError(DomainError):
    """Raised when the document store cannot be reached."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="The service is temporarily unavailable. Please try again later.",
        )
