"""Shared pytest fixtures for all test suites."""

import os
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from fleet.app.db.models import (
    Base,
    Franchise,
    FranchiseMembership,
    MaintenancePolicy,
    ScheduledMaintenance,
    SessionToken,
    User,
    Vehicle,
)


@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create an async engine over a fresh SQLite file with all tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'fleet_test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create an async session on the test engine."""
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@dataclass
class FleetData:
    """Builder for franchise, identity and maintenance rows."""

    session: AsyncSession

    async def franchise(self, name: str = "Franchise") -> uuid.UUID:
        franchise = Franchise(id=uuid.uuid4(), name=name)
        self.session.add(franchise)
        await self.session.commit()
        return franchise.id

    async def user(self, email: str | None = None) -> uuid.UUID:
        user = User(id=uuid.uuid4(), email=email or f"{uuid.uuid4().hex[:8]}@example.com")
        self.session.add(user)
        await self.session.commit()
        return user.id

    async def membership(
        self,
        user_id: uuid.UUID,
        franchise_id: uuid.UUID,
        role: str | None = "manager",
        *,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> uuid.UUID:
        membership = FranchiseMembership(
            id=uuid.uuid4(),
            user_id=user_id,
            franchise_id=franchise_id,
            role=role,
            is_active=is_active,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.session.add(membership)
        await self.session.commit()
        return membership.id

    async def token(
        self, user_id: uuid.UUID, token: str | None = None, ttl: timedelta = timedelta(hours=1)
    ) -> str:
        value = token or f"tok-{uuid.uuid4().hex}"
        self.session.add(
            SessionToken(
                id=uuid.uuid4(),
                user_id=user_id,
                token=value,
                expires_at=datetime.now(timezone.utc) + ttl,
            )
        )
        await self.session.commit()
        return value

    async def vehicle(
        self, franchise_id: uuid.UUID, number: str, current_mileage: int = 0
    ) -> uuid.UUID:
        vehicle = Vehicle(
            id=uuid.uuid4(),
            franchise_id=franchise_id,
            vehicle_number=number.upper(),
            current_mileage=current_mileage,
        )
        self.session.add(vehicle)
        await self.session.commit()
        return vehicle.id

    async def policy(
        self,
        franchise_id: uuid.UUID,
        maintenance_type: str,
        miles: int | None = None,
        days: int | None = None,
        *,
        is_active: bool = True,
    ) -> uuid.UUID:
        policy = MaintenancePolicy(
            id=uuid.uuid4(),
            franchise_id=franchise_id,
            maintenance_type=maintenance_type,
            default_interval_miles=miles,
            default_interval_days=days,
            is_active=is_active,
        )
        self.session.add(policy)
        await self.session.commit()
        return policy.id

    async def scheduled(
        self,
        franchise_id: uuid.UUID,
        maintenance_type: str,
        *,
        vehicle_id: uuid.UUID | None = None,
        interval_miles: int | None = None,
        interval_days: int | None = None,
        completed: bool | None = None,
        due_date: date | None = None,
        due_mileage: int | None = None,
        created_at: datetime | None = None,
    ) -> uuid.UUID:
        row = ScheduledMaintenance(
            id=uuid.uuid4(),
            franchise_id=franchise_id,
            vehicle_id=vehicle_id,
            maintenance_type=maintenance_type,
            interval_miles=interval_miles,
            interval_days=interval_days,
            completed=completed,
            due_date=due_date,
            due_mileage=due_mileage,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.session.add(row)
        await self.session.commit()
        return row.id


@pytest_asyncio.fixture
async def data(session: AsyncSession) -> FleetData:
    """Row builder bound to the test session."""
    return FleetData(session)


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for PostgreSQL integration tests."""
    async with AsyncSession(postgres_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
