"""Collection paths of the hub's documents, scoped to one application id."""

PROFILE_KEY = "profile"


def events_collection(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data/events"


def user_collection(app_id: str, identity_id: str) -> str:
    return f"artifacts/{app_id}/users/{identity_id}"


def registrations_collection(app_id: str, identity_id: str) -> str:
    return f"{user_collection(app_id, identity_id)}/registrations"
