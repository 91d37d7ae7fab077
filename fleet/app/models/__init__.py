"""Models package - re-exports for convenience."""

from fleet.app.models.context import ContextResponse
from fleet.app.models.maintenance import DueItem, DueReason, MaintenanceDueResponse
from fleet.app.models.policy import ApplyResponse, PolicyOut, PolicyUpdate, SeedResponse
from fleet.app.models.vehicles import IssueOut, VehicleSummary

__all__ = [
    # Context
    "ContextResponse",
    # Policy
    "PolicyUpdate",
    "PolicyOut",
    "ApplyResponse",
    "SeedResponse",
    # Maintenance
    "DueItem",
    "DueReason",
    "MaintenanceDueResponse",
    # Vehicles
    "VehicleSummary",
    "IssueOut",
]
