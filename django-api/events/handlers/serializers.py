"""Serializers for transforming domain models to API responses and back."""

from rest_framework import serializers

from events.domain import EventDraft
from events.services.view_projector import ViewTab


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    date = serializers.DateField()
    time = serializers.TimeField(format="%H:%M")
    location = serializers.CharField()
    capacity = serializers.IntegerField(source="capacity.value")
    attendees = serializers.ListField(child=serializers.CharField())
    attendee_count = serializers.SerializerMethodField()
    seats_left = serializers.IntegerField()
    status = serializers.CharField(source="status.value")
    creator_id = serializers.CharField()
    creator_email = serializers.CharField()

    def get_attendee_count(self, event) -> int:
        return len(event.attendees)


class EventCardSerializer(serializers.Serializer):
    """Serializer for an event as shown to one viewer."""

    event = EventSerializer()
    is_full = serializers.BooleanField()
    is_past = serializers.BooleanField()
    is_registered = serializers.BooleanField()
    is_creator = serializers.BooleanField()
    can_register = serializers.BooleanField()
    can_cancel = serializers.BooleanField()
    can_moderate = serializers.BooleanField()


class EventInputSerializer(serializers.Serializer):
    """Validates event fields submitted by a creator."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=["%H:%M"])
    location = serializers.CharField(max_length=255)
    capacity = serializers.IntegerField(
        min_value=1,
        error_messages={"min_value": "Capacity must be greater than 0."},
    )

    def to_draft(self) -> EventDraft:
        return EventDraft(**self.validated_data)


class EventQuerySerializer(serializers.Serializer):
    """Validates the tab and filter query parameters of the event list."""

    tab = serializers.ChoiceField(
        choices=[tab.value for tab in ViewTab], default=ViewTab.ALL.value
    )
    date = serializers.DateField(required=False)
    location = serializers.CharField(required=False, allow_blank=True)


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    event_id = serializers.CharField(source="event_id.value")
    registered_at = serializers.DateTimeField()


class ProfileSerializer(serializers.Serializer):
    """Serializer for Profile domain model."""

    identity_id = serializers.CharField()
    email = serializers.CharField()
    is_admin = serializers.BooleanField()
