"""SQLAlchemy ORM models for the fleet maintenance domain."""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class FranchiseOwned:
    """Mixin for tables partitioned by franchise.

    Only models carrying this mixin are reachable through a FranchiseScope.
    """

    @declared_attr
    def franchise_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(Uuid, ForeignKey("franchise.id"), nullable=False, index=True)


class Franchise(Base):
    """Franchise table - top-level tenancy boundary."""

    __tablename__ = "franchise"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    memberships: Mapped[list["FranchiseMembership"]] = relationship(
        "FranchiseMembership", back_populates="franchise"
    )


class User(Base):
    """User profile table - one row per authenticated identity."""

    __tablename__ = "user"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    memberships: Mapped[list["FranchiseMembership"]] = relationship(
        "FranchiseMembership", back_populates="user"
    )
    session_tokens: Mapped[list["SessionToken"]] = relationship(
        "SessionToken", back_populates="user", cascade="all, delete-orphan"
    )


class FranchiseMembership(Base):
    """Membership table - links a user to a franchise with a role."""

    __tablename__ = "franchise_membership"
    __table_args__ = (
        Index("idx_membership_user_active", "user_id", "is_active", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("user.id"), nullable=False)
    franchise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("franchise.id"), nullable=False
    )
    # Raw role string; normalized by the resolver
    role: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="memberships")
    franchise: Mapped["Franchise"] = relationship("Franchise", back_populates="memberships")


class SessionToken(Base):
    """Session token table - backs cookie/bearer authentication."""

    __tablename__ = "session_token"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="session_tokens")


class Vehicle(FranchiseOwned, Base):
    """Vehicle table - franchise-scoped fleet units."""

    __tablename__ = "vehicle"
    __table_args__ = (
        UniqueConstraint("franchise_id", "vehicle_number", name="uq_vehicle_franchise_number"),
    )

    # Case-insensitive lookup key used by validate_entity_in_franchise
    natural_key = "vehicle_number"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_number: Mapped[str] = mapped_column(Text, nullable=False)
    make: Mapped[str | None] = mapped_column(Text, nullable=True)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_mileage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(Text, default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    issues: Mapped[list["VehicleIssue"]] = relationship("VehicleIssue", back_populates="vehicle")


class VehicleIssue(FranchiseOwned, Base):
    """Vehicle issue table - problems reported against a vehicle."""

    __tablename__ = "vehicle_issue"
    __table_args__ = (Index("idx_issue_vehicle", "vehicle_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vehicle.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, default="open", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="issues")


class MaintenancePolicy(FranchiseOwned, Base):
    """Maintenance policy table - default intervals per maintenance type."""

    __tablename__ = "maintenance_policy"
    __table_args__ = (
        UniqueConstraint("franchise_id", "maintenance_type", name="uq_policy_franchise_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    maintenance_type: Mapped[str] = mapped_column(Text, nullable=False)
    default_interval_miles: Mapped[int | None] = mapped_column(Integer, nullable=True)
    default_interval_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ScheduledMaintenance(FranchiseOwned, Base):
    """Scheduled maintenance table - planned service tasks."""

    __tablename__ = "scheduled_maintenance"
    __table_args__ = (
        Index("idx_scheduled_franchise_type", "franchise_id", "maintenance_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("vehicle.id"), nullable=True
    )
    maintenance_type: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    interval_miles: Mapped[int | None] = mapped_column(Integer, nullable=True)
    interval_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
