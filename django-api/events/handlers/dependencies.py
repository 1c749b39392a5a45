"""Builds the explicit service context for each request."""

from functools import lru_cache

from django.utils import timezone
from django.utils.module_loading import import_string
from rest_framework.request import Request

from events.conf import hub_settings
from events.domain import Identity
from events.services.base import HubContext
from events.stores.interfaces import DocumentStore


@lru_cache(maxsize=None)
def document_store(backend: str) -> DocumentStore:
    """One store instance per backend path for the life of the process."""
    return import_string(backend)()


def hub_context() -> HubContext:
    conf = hub_settings()
    return HubContext(
        store=document_store(conf.store_backend),
        app_id=conf.app_id,
        clock=timezone.now,
        tz=timezone.get_default_timezone(),
        max_attempts=conf.max_attempts,
    )


def current_identity(request: Request) -> Identity:
    user = request.user
    return Identity(id=str(user.pk), email=user.email or None)
