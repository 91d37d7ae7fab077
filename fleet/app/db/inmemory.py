"""In-memory implementations of repository interfaces."""

import uuid
from datetime import datetime, timedelta, timezone

from fleet.app.db.repositories import MembershipRecord, ProfileRecord


class InMemorySessionAuthenticator:
    """In-memory implementation of SessionAuthenticator."""

    def __init__(self) -> None:
        self._tokens: dict[str, tuple[uuid.UUID, datetime]] = {}

    def issue(self, user_id: uuid.UUID, token: str, ttl: timedelta = timedelta(hours=12)) -> str:
        """Register a token for a user."""
        self._tokens[token] = (user_id, datetime.now(timezone.utc) + ttl)
        return token

    async def get_session_identity(self, token: str) -> uuid.UUID | None:
        """Resolve a session token to its user ID."""
        entry = self._tokens.get(token)

        if entry is None:
            return None

        user_id, expires_at = entry
        if expires_at <= datetime.now(timezone.utc):
            return None

        return user_id


class InMemoryIdentityDirectory:
    """In-memory implementation of IdentityDirectory.

    Counts calls so tests can assert when the directory was never consulted.
    """

    def __init__(self) -> None:
        self._profiles: dict[uuid.UUID, ProfileRecord] = {}
        self._memberships: list[MembershipRecord] = []
        self.calls = 0

    def add_profile(self, user_id: uuid.UUID, email: str, full_name: str | None = None) -> None:
        """Add a profile row."""
        self._profiles[user_id] = ProfileRecord(user_id=user_id, email=email, full_name=full_name)

    def add_membership(
        self,
        user_id: uuid.UUID,
        franchise_id: uuid.UUID,
        role: str | None = "driver",
        *,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> MembershipRecord:
        """Add a membership row."""
        record = MembershipRecord(
            membership_id=uuid.uuid4(),
            user_id=user_id,
            franchise_id=franchise_id,
            role=role,
            is_active=is_active,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._memberships.append(record)
        return record

    async def get_profile(self, user_id: uuid.UUID) -> ProfileRecord | None:
        """Get the profile row for an identity."""
        self.calls += 1
        return self._profiles.get(user_id)

    async def list_active_memberships(self, user_id: uuid.UUID) -> list[MembershipRecord]:
        """List active memberships, earliest first."""
        self.calls += 1
        rows = [m for m in self._memberships if m.user_id == user_id and m.is_active]
        rows.sort(key=lambda m: (m.created_at, str(m.membership_id)))
        return rows
