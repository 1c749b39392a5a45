"""Hub configuration read from the ``EVENTS_HUB`` Django setting."""

from dataclasses import dataclass

from django.conf import settings

DEFAULT_STORE_BACKEND = "events.stores.django_store.DjangoDocumentStore"


@dataclass(frozen=True)
class HubSettings:
    app_id: str = "default-app-id"
    max_attempts: int = 5
    cache_timeout: int = 60
    store_backend: str = DEFAULT_STORE_BACKEND


def hub_settings() -> HubSettings:
    raw = getattr(settings, "EVENTS_HUB", {})
    return HubSettings(
        app_id=raw.get("APP_ID", HubSettings.app_id),
        max_attempts=int(raw.get("REGISTRATION_MAX_ATTEMPTS", HubSettings.max_attempts)),
        cache_timeout=int(raw.get("CACHE_TIMEOUT", HubSettings.cache_timeout)),
        store_backend=raw.get("STORE_BACKEND", HubSettings.store_backend),
    )
