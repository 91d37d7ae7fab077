"""Vehicle and vehicle-issue response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class VehicleSummary(BaseModel):
    """Minimal vehicle fields returned by franchise-scoped lookups."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vehicle_number: str
    current_mileage: int


class IssueOut(BaseModel):
    """Vehicle issue detail."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vehicle_id: UUID
    description: str
    status: str
    created_at: datetime
