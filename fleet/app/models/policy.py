"""Maintenance policy request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PolicyUpdate(BaseModel):
    """Manager-supplied policy configuration for one maintenance type."""

    maintenance_type: str = Field(..., min_length=1, max_length=100)
    default_interval_miles: int | None = Field(None, gt=0)
    default_interval_days: int | None = Field(None, gt=0)
    is_active: bool = True

    @field_validator("maintenance_type")
    @classmethod
    def strip_type(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("maintenance_type must not be blank")
        return cleaned


class PolicyOut(BaseModel):
    """Stored maintenance policy."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    maintenance_type: str
    default_interval_miles: int | None
    default_interval_days: int | None
    is_active: bool
    updated_at: datetime


class ApplyResponse(BaseModel):
    """Response for POST /manager/maintenance-policy/apply."""

    updated: int


class SeedResponse(BaseModel):
    """Response for POST /manager/maintenance-policy/seed."""

    seeded: int
    types: list[str]
