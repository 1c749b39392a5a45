"""Unit tests for the view projector and the live event view.

Run with: pytest tests/test_view_projector.py -v
"""

from datetime import date, datetime, time, timezone

import pytest

from events.domain import Capacity, Event, EventId, EventStatus, Profile
from events.services.registration_service import RegistrationService
from events.services.view_projector import (
    EventFilters,
    LiveEventView,
    ViewTab,
    event_card,
    project,
)

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
USER = Profile(identity_id="alice", email="alice@example.com")
ADMIN = Profile(identity_id="root", email="root@example.com", is_admin=True)


def _event(key: str, status: EventStatus = EventStatus.APPROVED, **overrides) -> Event:
    fields = {
        "id": EventId(key),
        "title": key.title(),
        "description": "",
        "date": date(2030, 6, 1),
        "time": time(18, 0),
        "location": "Main Hall",
        "capacity": Capacity(2),
        "status": status,
        "creator_id": "someone",
        "creator_email": "someone@example.com",
    }
    fields.update(overrides)
    return Event(**fields)


@pytest.fixture
def mixed_events() -> list[Event]:
    return [
        _event("approved"),
        _event("pending", EventStatus.PENDING),
        _event("rejected", EventStatus.REJECTED),
    ]


class TestProject:
    def test_all_tab_shows_only_approved(self, mixed_events):
        """The all tab shows approved events only."""
        assert [e.id.value for e in project(mixed_events, ViewTab.ALL, USER)] == ["approved"]

    def test_admin_pending_hidden_from_non_admin(self, mixed_events):
        """Non-admins see nothing on the admin tab."""
        assert project(mixed_events, ViewTab.ADMIN_PENDING, USER) == []

    def test_admin_pending_visible_to_admin(self, mixed_events):
        """Admins see pending events on the admin tab."""
        visible = project(mixed_events, ViewTab.ADMIN_PENDING, ADMIN)
        assert [e.id.value for e in visible] == ["pending"]

    def test_mine_created_ignores_status(self):
        """mine-created lists own events in any status."""
        events = [
            _event("a", EventStatus.PENDING, creator_id="alice"),
            _event("b", EventStatus.REJECTED, creator_id="alice"),
            _event("c"),
        ]
        visible = project(events, ViewTab.MINE_CREATED, USER)
        assert [e.id.value for e in visible] == ["a", "b"]

    def test_mine_registered_uses_attendees(self):
        """mine-registered follows attendee membership."""
        events = [_event("a", attendees=("alice",)), _event("b", attendees=("bob",))]
        visible = project(events, ViewTab.MINE_REGISTERED, USER)
        assert [e.id.value for e in visible] == ["a"]

    def test_filters_combine_with_and(self):
        """Date and location filters must both match."""
        events = [
            _event("hall-june", location="Main Hall"),
            _event("hall-july", location="main hall annex", date=date(2030, 7, 1)),
            _event("park-june", location="City Park"),
        ]
        filters = EventFilters(date=date(2030, 6, 1), location="HALL")
        visible = project(events, ViewTab.ALL, USER, filters)
        assert [e.id.value for e in visible] == ["hall-june"]

    def test_default_filters_match_every_event(self):
        """Empty filters keep every event of the tab."""
        events = [_event("a", location="Main Hall"), _event("b", date=date(2031, 1, 1))]
        assert EventFilters().date is None
        assert project(events, ViewTab.ALL, USER, EventFilters()) == events

    def test_location_filter_is_case_insensitive_substring(self):
        """Location matches case-insensitive substrings."""
        events = [_event("a", location="Main Hall"), _event("b", location="Garden")]
        visible = project(events, ViewTab.ALL, USER, EventFilters(location="hal"))
        assert [e.id.value for e in visible] == ["a"]


class TestEventCard:
    def test_full_event_stays_listed_but_cannot_be_joined(self):
        """Full events stay listed without a register control."""
        event = _event("full", attendees=("x", "y"))
        card = event_card(event, USER, NOW)

        assert project([event], ViewTab.ALL, USER) == [event]
        assert card.is_full
        assert not card.can_register
        assert not card.can_cancel

    def test_registered_viewer_can_cancel(self):
        """Registered viewers get a cancel control."""
        card = event_card(_event("e", attendees=("alice",)), USER, NOW)
        assert card.is_registered
        assert card.can_cancel
        assert not card.can_register

    def test_past_event_suppresses_controls(self):
        """Past events show neither register nor cancel."""
        event = _event("past", date=date(2029, 12, 31), attendees=("alice",))
        card = event_card(event, USER, NOW)
        assert card.is_past
        assert not card.can_register
        assert not card.can_cancel

    def test_pending_event_has_no_registration_controls(self):
        """Pending events only offer moderation to admins."""
        card = event_card(_event("p", EventStatus.PENDING), ADMIN, NOW)
        assert not card.can_register
        assert card.can_moderate


class TestLiveEventView:
    def test_initial_snapshot_is_projected(self, context, make_event):
        """The first snapshot is projected on construction."""
        make_event(title="Visible")
        make_event(title="Hidden", approved=False)
        pushed = []

        view = LiveEventView(context, USER, pushed.append)

        assert [e.title for e in pushed[-1]] == ["Visible"]
        view.close()

    def test_store_changes_are_pushed(self, context, admin, make_event):
        """Store writes push a re-projected list."""
        pushed = []
        view = LiveEventView(context, USER, pushed.append)

        event = make_event()

        assert [e.id for e in view.visible] == [event.id]
        assert [e.id for e in pushed[-1]] == [event.id]
        view.close()

    def test_registration_moves_event_into_mine_registered(self, context, alice, make_event):
        """Registering moves the event into mine-registered."""
        event = make_event()
        viewer = Profile(identity_id=alice.id, email=alice.display_email)
        view = LiveEventView(context, viewer, lambda events: None, tab=ViewTab.MINE_REGISTERED)
        assert view.visible == []

        RegistrationService(context).register(event.id.value, alice)

        assert [e.id for e in view.visible] == [event.id]
        view.close()

    def test_switch_tab_and_filters_rederive(self, context, alice, make_event):
        """Switching tab or filters re-derives the list."""
        mine = make_event(creator=alice, approved=False, location="Rooftop")
        viewer = Profile(identity_id=alice.id, email=alice.display_email)
        view = LiveEventView(context, viewer, lambda events: None)
        assert view.visible == []

        assert [e.id for e in view.switch_tab(ViewTab.MINE_CREATED)] == [mine.id]
        assert view.apply_filters(location="basement") == []
        assert [e.id for e in view.apply_filters(location="roof")] == [mine.id]
        view.close()

    def test_close_stops_delivery_and_is_idempotent(self, context, store, make_event):
        """close detaches the view and can be called twice."""
        pushed = []
        view = LiveEventView(context, USER, pushed.append)

        view.close()
        view.close()
        make_event()

        assert view.closed
        assert len(pushed) == 1
        assert store.subscriber_count(f"artifacts/{context.app_id}/public/data/events") == 0
