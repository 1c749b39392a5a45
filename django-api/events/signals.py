"""Django signals for change notification and cache invalidation.

``document_changed`` fires once per committed write to a Document row and
drives the live queries of ``DjangoDocumentStore``.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from events.cache import invalidate_event
from events.conf import hub_settings
from events.models import Document
from events.stores.paths import events_collection

# Provides: collection, key
document_changed = Signal()


@receiver([post_save, post_delete], sender=Document)
def announce_document_change(sender, instance, **kwargs):
    """Invalidate caches now and notify live queries once the write commits."""
    invalidate_event_cache(sender, collection=instance.collection, key=instance.key)
    transaction.on_commit(
        partial(
            document_changed.send,
            sender=Document,
            collection=instance.collection,
            key=instance.key,
        )
    )


@receiver(document_changed)
def invalidate_event_cache(sender, collection, key, **kwargs):
    """Invalidate caches when an event document is saved or deleted."""
    if collection == events_collection(hub_settings().app_id):
        invalidate_event(key)
