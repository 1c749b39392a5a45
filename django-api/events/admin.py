from django.contrib import admin

from events.models import Document


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    """Raw document access; also how ``isAdmin`` is granted on a profile."""

    list_display = ["collection", "key", "version", "updated_at"]
    list_filter = ["collection"]
    search_fields = ["collection", "key"]
    readonly_fields = ["version", "created_at", "updated_at"]
