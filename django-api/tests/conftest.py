"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, time, timezone

import pytest
from rest_framework.test import APIClient

from events.domain import EventDraft, Identity, Profile
from events.services.base import HubContext
from events.services.event_service import EventService
from events.services.moderation_service import ModerationService
from events.stores.interfaces import StoreError
from events.stores.memory_store import InMemoryDocumentStore
from events.stores.repositories import ProfileRepository

APP_ID = "test-app"
NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
FUTURE_DAY = date(2030, 6, 1)
PAST_DAY = date(2029, 6, 1)


class FlakyDocumentStore(InMemoryDocumentStore):
    """In-memory store whose writes to chosen collections can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.failing_suffixes: set[str] = set()

    def _check(self, collection: str) -> None:
        if any(collection.endswith(suffix) for suffix in self.failing_suffixes):
            raise StoreError(f"{collection} is unavailable")

    def put(self, collection, key, fields):
        self._check(collection)
        return super().put(collection, key, fields)

    def update(self, collection, key, fields, expected_version=None):
        self._check(collection)
        return super().update(collection, key, fields, expected_version)

    def delete(self, collection, key):
        self._check(collection)
        super().delete(collection, key)

    def get(self, collection, key):
        self._check(collection)
        return super().get(collection, key)


def grant_admin(store, identity: Identity) -> None:
    """Out-of-band admin grant, as an operator would do through the admin site."""
    ProfileRepository(store, APP_ID).save_profile(
        Profile(identity_id=identity.id, email=identity.display_email, is_admin=True)
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store() -> FlakyDocumentStore:
    return FlakyDocumentStore()


@pytest.fixture
def context(store) -> HubContext:
    return HubContext(store=store, app_id=APP_ID, clock=lambda: NOW, max_attempts=10)


@pytest.fixture
def alice() -> Identity:
    return Identity(id="alice", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(id="bob", email="bob@example.com")


@pytest.fixture
def admin(store) -> Identity:
    identity = Identity(id="admin", email="admin@example.com")
    grant_admin(store, identity)
    return identity


@pytest.fixture
def make_draft():
    def _make(**overrides) -> EventDraft:
        fields = {
            "title": "Launch party",
            "description": "Drinks on the roof",
            "date": FUTURE_DAY,
            "time": time(18, 0),
            "location": "Main Hall",
            "capacity": 2,
        }
        fields.update(overrides)
        return EventDraft(**fields)

    return _make


@pytest.fixture
def make_event(context, alice, admin, make_draft):
    """Create an event as alice (default) and approve it as admin unless told not to."""
    events = EventService(context)
    moderation = ModerationService(context)

    def _make(creator: Identity | None = None, approved: bool = True, **overrides):
        event = events.create_event(creator or alice, make_draft(**overrides))
        if approved:
            event = moderation.approve(event.id.value, admin)
        return event

    return _make
