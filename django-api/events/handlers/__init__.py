from events.handlers.views import (
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

__all__ = [
    "EventApproveView",
    "EventDetailView",
    "EventListView",
    "EventRejectView",
    "MyRegistrationsView",
    "ProfileView",
    "PruneRegistrationsView",
    "RegistrationReconcileView",
    "RegistrationView",
]
