"""Repository protocol interfaces for identity and session data."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass
class ProfileRecord:
    """User profile data record."""

    user_id: UUID
    email: str
    full_name: str | None


@dataclass
class MembershipRecord:
    """Franchise membership data record (role not yet normalized)."""

    membership_id: UUID
    user_id: UUID
    franchise_id: UUID
    role: str | None
    is_active: bool
    created_at: datetime


class SessionAuthenticator(Protocol):
    """Authentication collaborator that maps a session token to an identity."""

    async def get_session_identity(self, token: str) -> UUID | None:
        """Resolve a session token.

        Args:
            token: Opaque session token from a cookie or bearer header

        Returns:
            Identity (user) ID, or None if the token is unknown or expired

        Raises:
            BackendUnavailableError: If the session store cannot be read
        """
        ...


class IdentityDirectory(Protocol):
    """Read-only access to profiles and franchise memberships."""

    async def get_profile(self, user_id: UUID) -> ProfileRecord | None:
        """Get the profile row for an identity.

        Args:
            user_id: Identity ID

        Returns:
            Profile record or None if the identity has no profile
        """
        ...

    async def list_active_memberships(self, user_id: UUID) -> list[MembershipRecord]:
        """List active memberships for an identity.

        Args:
            user_id: Identity ID

        Returns:
            Active memberships ordered by created_at ascending, then membership ID
        """
        ...
