"""Dev seeding helper - franchise, manager, membership and a session token."""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet.app.config import get_settings
from fleet.app.db.engine import get_async_engine
from fleet.app.db.models import Franchise, FranchiseMembership, SessionToken, User

# Fixed IDs so the dev token can be reused across restarts
DEV_FRANCHISE_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEV_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
DEV_SESSION_TOKEN = "dev-manager-session"


async def seed_dev_franchise(session: AsyncSession) -> None:
    """Seed a dev franchise with one manager and a session token.

    This function is idempotent - safe to run multiple times.
    Creates:
    - Franchise with id DEV_FRANCHISE_ID if it doesn't exist
    - User with id DEV_USER_ID if it doesn't exist
    - Active manager membership linking them if none exists
    - Session token DEV_SESSION_TOKEN, refreshed to a new expiry
    """
    franchise = await session.get(Franchise, DEV_FRANCHISE_ID)
    if franchise is None:
        print(f"Creating dev franchise with id {DEV_FRANCHISE_ID}...")
        session.add(Franchise(id=DEV_FRANCHISE_ID, name="Dev Franchise"))
    else:
        print(f"Dev franchise already exists: {franchise.name}")

    user = await session.get(User, DEV_USER_ID)
    if user is None:
        print(f"Creating dev user with id {DEV_USER_ID}...")
        session.add(User(id=DEV_USER_ID, email="manager@example.com", full_name="Dev Manager"))
    else:
        print(f"Dev user already exists: {user.email}")

    await session.flush()

    result = await session.execute(
        select(FranchiseMembership).where(
            FranchiseMembership.user_id == DEV_USER_ID,
            FranchiseMembership.franchise_id == DEV_FRANCHISE_ID,
        )
    )
    if result.scalar_one_or_none() is None:
        session.add(
            FranchiseMembership(
                user_id=DEV_USER_ID,
                franchise_id=DEV_FRANCHISE_ID,
                role="manager",
                is_active=True,
            )
        )

    expires_at = datetime.now(timezone.utc) + timedelta(
        minutes=get_settings().session_ttl_minutes
    )
    token_result = await session.execute(
        select(SessionToken).where(SessionToken.token == DEV_SESSION_TOKEN)
    )
    token = token_result.scalar_one_or_none()
    if token is None:
        session.add(
            SessionToken(user_id=DEV_USER_ID, token=DEV_SESSION_TOKEN, expires_at=expires_at)
        )
    else:
        token.expires_at = expires_at

    await session.commit()


async def main() -> None:
    async with AsyncSession(get_async_engine(), expire_on_commit=False) as session:
        await seed_dev_franchise(session)
    print(f"Dev seeding complete. Use: Authorization: Bearer {DEV_SESSION_TOKEN}")


if __name__ == "__main__":
    asyncio.run(main())
