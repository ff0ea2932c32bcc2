"""User profile service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from macro_planner.domain.models import UserProfile


class ProfileRepository(Protocol):
    """Read interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile if present."""


@dataclass
class ProfileService:
    """Service for reading profile data."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the stored profile or an empty one."""
        return self.repository.get_profile(user_id) or UserProfile(user_id=user_id)

    def get_timezone(self, user_id: UUID) -> ZoneInfo:
        """Return the user timezone or UTC if unset or unknown."""
        profile = self.repository.get_profile(user_id)
        name = profile.timezone if profile else None
        if not name:
            return ZoneInfo("UTC")
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")
