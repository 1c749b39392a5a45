"""Client-visible event lists derived from the live event collection.

``project`` is a pure function of the events, the viewer and the filters.
``LiveEventView`` keeps it applied to the latest snapshot pushed by the store.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone, tzinfo
from enum import Enum

from events.domain import Event, EventStatus, Profile
from events.services.base import HubContext
from events.stores.interfaces import Subscription
from events.stores.repositories import EventRepository


class ViewTab(Enum):
    ALL = "all"
    MINE_CREATED = "mine-created"
    MINE_REGISTERED = "mine-registered"
    ADMIN_PENDING = "admin-pending"


@dataclass(frozen=True)
class EventFilters:
    """Secondary filters, combined with AND after the tab filter."""

    date: date | None = None
    location: str | None = None

    def matches(self, event: Event) -> bool:
        if self.date is not None and event.date != self.date:
            return False
        if self.location and self.location.lower() not in event.location.lower():
            return False
        return True


@dataclass(frozen=True)
class EventCard:
    """An event plus the display state of its controls for one viewer."""

    event: Event
    is_full: bool
    is_past: bool
    is_registered: bool
    is_creator: bool
    can_register: bool
    can_cancel: bool
    can_moderate: bool


def in_tab(event: Event, tab: ViewTab, viewer: Profile) -> bool:
    if tab is ViewTab.ALL:
        return event.status is EventStatus.APPROVED
    if tab is ViewTab.MINE_CREATED:
        return event.creator_id == viewer.identity_id
    if tab is ViewTab.MINE_REGISTERED:
        return event.has_attendee(viewer.identity_id)
    if tab is ViewTab.ADMIN_PENDING:
        return viewer.is_admin and event.status is EventStatus.PENDING
    return False


def project(
    events: Iterable[Event],
    tab: ViewTab,
    viewer: Profile,
    filters: EventFilters = EventFilters(),
) -> list[Event]:
    return [
        event
        for event in events
        if in_tab(event, tab, viewer) and filters.matches(event)
    ]


def event_card(
    event: Event, viewer: Profile, now: datetime, tz: tzinfo = timezone.utc
) -> EventCard:
    """Full events keep their card but cannot be joined; past events lose both controls."""
    is_full = event.is_full
    is_past = event.is_past(now, tz)
    is_registered = event.has_attendee(viewer.identity_id)
    open_controls = event.status is EventStatus.APPROVED and not is_past
    return EventCard(
        event=event,
        is_full=is_full,
        is_past=is_past,
        is_registered=is_registered,
        is_creator=event.creator_id == viewer.identity_id,
        can_register=open_controls and not is_registered and not is_full,
        can_cancel=open_controls and is_registered,
        can_moderate=viewer.is_admin and event.status is EventStatus.PENDING,
    )


class LiveEventView:
    """Re-projects the event collection on every change, tab switch or filter change.

    ``listener`` receives the visible events each time they are derived.
    """

    def __init__(
        self,
        context: HubContext,
        viewer: Profile,
        listener: Callable[[list[Event]], None],
        tab: ViewTab = ViewTab.ALL,
        filters: EventFilters = EventFilters(),
    ) -> None:
        self._viewer = viewer
        self._listener = listener
        self._tab = tab
        self._filters = filters
        self._snapshot: list[Event] = []
        self._visible: list[Event] = []
        self._lock = threading.RLock()
        self._subscription: Subscription = EventRepository(
            context.store, context.app_id
        ).subscribe(self._on_snapshot)

    @property
    def tab(self) -> ViewTab:
        return self._tab

    @property
    def filters(self) -> EventFilters:
        return self._filters

    @property
    def visible(self) -> list[Event]:
        with self._lock:
            return list(self._visible)

    @property
    def closed(self) -> bool:
        return not self._subscription.active

    def switch_tab(self, tab: ViewTab) -> list[Event]:
        with self._lock:
            self._tab = tab
        return self._refresh()

    def apply_filters(self, date: date | None = None, location: str | None = None) -> list[Event]:
        with self._lock:
            self._filters = replace(self._filters, date=date, location=location)
        return self._refresh()

    def close(self) -> None:
        self._subscription.unsubscribe()

    def _on_snapshot(self, events: list[Event]) -> None:
        with self._lock:
            self._snapshot = events
        self._refresh()

    def _refresh(self) -> list[Event]:
        with self._lock:
            self._visible = project(self._snapshot, self._tab, self._viewer, self._filters)
            visible = list(self._visible)
        self._listener(visible)
        return visible
