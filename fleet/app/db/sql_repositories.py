"""SQL implementations of repository interfaces."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleet.app.db.models import FranchiseMembership, SessionToken, User
from fleet.app.db.repositories import MembershipRecord, ProfileRecord
from fleet.app.errors import BackendUnavailableError


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlSessionAuthenticator:
    """SQL implementation of SessionAuthenticator."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_session_identity(self, token: str) -> uuid.UUID | None:
        """Resolve a session token to its user ID."""
        if not token:
            return None

        try:
            result = await self._session.execute(
                select(SessionToken).where(SessionToken.token == token)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

        if record is None:
            return None

        if _as_utc(record.expires_at) <= datetime.now(timezone.utc):
            return None

        return record.user_id


class SqlIdentityDirectory:
    """SQL implementation of IdentityDirectory."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_profile(self, user_id: uuid.UUID) -> ProfileRecord | None:
        """Get the profile row for an identity."""
        try:
            result = await self._session.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

        if user is None:
            return None

        return ProfileRecord(user_id=user.id, email=user.email, full_name=user.full_name)

    async def list_active_memberships(self, user_id: uuid.UUID) -> list[MembershipRecord]:
        """List active memberships, earliest first."""
        query = (
            select(FranchiseMembership)
            .where(
                FranchiseMembership.user_id == user_id,
                FranchiseMembership.is_active.is_(True),
            )
            .order_by(FranchiseMembership.created_at.asc(), FranchiseMembership.id.asc())
        )

        try:
            result = await self._session.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise BackendUnavailableError(str(e)) from e

        return [
            MembershipRecord(
                membership_id=row.id,
                user_id=row.user_id,
                franchise_id=row.franchise_id,
                role=row.role,
                is_active=row.is_active,
                created_at=row.created_at,
            )
            for row in rows
        ]
