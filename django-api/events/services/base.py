"""Explicit service context and helpers shared by the hub services."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo

from events.domain import EventId
from events.domain.errors import InvalidEventIdError, StoreUnavailableError
from events.stores.interfaces import DocumentStore, StoreError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HubContext:
    """Everything a service needs, passed in explicitly at construction."""

    store: DocumentStore
    app_id: str = "default-app-id"
    clock: Callable[[], datetime] = field(default=utc_now)
    tz: tzinfo = timezone.utc
    max_attempts: int = 5


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (AttributeError, ValueError) as exc:
        raise InvalidEventIdError() from exc


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate gateway failures into StoreUnavailableError."""
    try:
        yield
    except StoreError as exc:
        logger.warning("Document store call failed: %s", exc)
        raise StoreUnavailableError() from exc
