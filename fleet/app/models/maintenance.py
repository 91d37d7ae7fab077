"""Maintenance-due report models."""

from datetime import date
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

DueReason = Literal["date+mileage", "date", "mileage"]


class DueItem(BaseModel):
    """An open scheduled task that is due by date, mileage or both."""

    id: UUID
    vehicle_id: UUID
    vehicle_number: str
    current_mileage: int
    maintenance_type: str
    description: str | None
    due_date: date | None
    due_mileage: int | None
    due_reason: DueReason


class MaintenanceDueResponse(BaseModel):
    """Response for GET /manager/maintenance-due."""

    vehicles_due_for_service: int
    due_items: list[DueItem]
