"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


class Document(models.Model):
    """One JSON document addressed by (collection path, key)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    collection = models.CharField(max_length=512)
    key = models.CharField(max_length=255)
    data = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["collection", "key"], name="unique_document_key"
            ),
        ]
        indexes = [
            models.Index(
                fields=["collection", "created_at"], name="document_collection_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.collection}/{self.key}"
