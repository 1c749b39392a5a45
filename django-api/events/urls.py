from django.urls import path

from events.handlers import (
    EventApproveView,
    EventDetailView,
    EventListView,
    EventRejectView,
    MyRegistrationsView,
    ProfileView,
    PruneRegistrationsView,
    RegistrationReconcileView,
    RegistrationView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/registration",
        RegistrationView.as_view(),
        name="event-registration",
    ),
    path(
        "events/<str:event_id>/registration/reconcile",
        RegistrationReconcileView.as_view(),
        name="event-registration-reconcile",
    ),
    path(
        "events/<str:event_id>/approve",
        EventApproveView.as_view(),
        name="event-approve",
    ),
    path(
        "events/<str:event_id>/reject",
        EventRejectView.as_view(),
        name="event-reject",
    ),
    path("profile", ProfileView.as_view(), name="profile"),
    path("registrations", MyRegistrationsView.as_view(), name="my-registrations"),
    path(
        "registrations/prune",
        PruneRegistrationsView.as_view(),
        name="prune-registrations",
    ),
]
