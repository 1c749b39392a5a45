"""Profile resolution for authenticated identities."""

import logging

from events.domain import Identity, Profile
from events.services.base import HubContext, store_errors
from events.stores.repositories import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileResolver:
    """Fetches a profile, creating a non-admin one on first sight.

    Admin rights are never granted here; ``isAdmin`` is only set out-of-band.
    """

    def __init__(self, context: HubContext) -> None:
        self._profiles = ProfileRepository(context.store, context.app_id)

    def resolve(self, identity: Identity) -> Profile:
        with store_errors():
            profile = self._profiles.get_profile(identity.id)
            if profile is None:
                profile = Profile(identity_id=identity.id, email=identity.display_email)
                self._profiles.save_profile(profile)
                logger.info("Created profile for identity=%s", identity.id)
        return profile
