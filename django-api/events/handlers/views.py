"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.cache import EVENT_LIST_KEY, event_detail_key
from events.conf import hub_settings
from events.domain.errors import DomainError, ErrorCode
from events.handlers.dependencies import current_identity, hub_context
from events.handlers.serializers import (
    EventCardSerializer,
    EventInputSerializer,
    EventQuerySerializer,
    EventSerializer,
    ProfileSerializer,
    RegistrationSerializer,
)
from events.services.base import parse_event_id
from events.services.event_service import EventService
from events.services.moderation_service import ModerationService
from events.services.profile_service import ProfileResolver
from events.services.registration_service import RegistrationService
from events.services.view_projector import EventFilters, ViewTab, event_card, project

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.REGISTRATION_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.WRITE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.PARTIAL_WRITE_INCONSISTENCY: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=ERROR_STATUS.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


class HubAPIView(APIView):
    """Base view that turns domain errors into ``{"code", "message"}`` responses."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.info("Request failed with %s", exc.code.value)
            return error_response(exc)
        return super().handle_exception(exc)


class EventListView(HubAPIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        query = EventQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        context = hub_context()
        viewer = ProfileResolver(context).resolve(current_identity(request))

        events = cache.get(EVENT_LIST_KEY)
        if events is None:
            events = EventService(context).list_events()
            cache.set(EVENT_LIST_KEY, events, hub_settings().cache_timeout)

        filters = EventFilters(
            date=query.validated_data.get("date"),
            location=query.validated_data.get("location") or None,
        )
        visible = project(events, ViewTab(query.validated_data["tab"]), viewer, filters)
        now = context.clock()
        cards = [event_card(event, viewer, now, context.tz) for event in visible]
        return Response(EventCardSerializer(cards, many=True).data)

    def post(self, request: Request) -> Response:
        payload = EventInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        event = EventService(hub_context()).create_event(
            current_identity(request), payload.to_draft()
        )
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(HubAPIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        key = event_detail_key(parse_event_id(event_id).value)
        event = cache.get(key)
        if event is None:
            event = EventService(hub_context()).get_event(event_id)
            cache.set(key, event, hub_settings().cache_timeout)
        return Response(EventSerializer(event).data)

    def patch(self, request: Request, event_id: str) -> Response:
        payload = EventInputSerializer(data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        event = EventService(hub_context()).update_event(
            event_id, current_identity(request), **payload.validated_data
        )
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        EventService(hub_context()).delete_event(event_id, current_identity(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationView(HubAPIView):
    """Handler for POST/DELETE /api/events/{event_id}/registration"""

    def post(self, request: Request, event_id: str) -> Response:
        registration = RegistrationService(hub_context()).register(
            event_id, current_identity(request)
        )
        return Response(
            RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED
        )

    def delete(self, request: Request, event_id: str) -> Response:
        RegistrationService(hub_context()).cancel(event_id, current_identity(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationReconcileView(HubAPIView):
    """Handler for POST /api/events/{event_id}/registration/reconcile"""

    def post(self, request: Request, event_id: str) -> Response:
        registration = RegistrationService(hub_context()).reconcile(
            event_id, current_identity(request)
        )
        if registration is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(RegistrationSerializer(registration).data)


class EventApproveView(HubAPIView):
    """Handler for POST /api/events/{event_id}/approve"""

    def post(self, request: Request, event_id: str) -> Response:
        event = ModerationService(hub_context()).approve(
            event_id, current_identity(request)
        )
        return Response(EventSerializer(event).data)


class EventRejectView(HubAPIView):
    """Handler for POST /api/events/{event_id}/reject"""

    def post(self, request: Request, event_id: str) -> Response:
        event = ModerationService(hub_context()).reject(
            event_id, current_identity(request)
        )
        return Response(EventSerializer(event).data)


class ProfileView(HubAPIView):
    """Handler for GET /api/profile"""

    def get(self, request: Request) -> Response:
        profile = ProfileResolver(hub_context()).resolve(current_identity(request))
        return Response(ProfileSerializer(profile).data)


class MyRegistrationsView(HubAPIView):
    """Handler for GET /api/registrations"""

    def get(self, request: Request) -> Response:
        registrations = RegistrationService(hub_context()).list_registrations(
            current_identity(request)
        )
        return Response(RegistrationSerializer(registrations, many=True).data)


class PruneRegistrationsView(HubAPIView):
    """Handler for POST /api/registrations/prune"""

    def post(self, request: Request) -> Response:
        pruned = RegistrationService(hub_context()).prune_orphans(
            current_identity(request)
        )
        return Response({"pruned": [event_id.value for event_id in pruned]})
