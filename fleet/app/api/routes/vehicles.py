"""Vehicle endpoints - franchise-validated vehicle and nested issue lookups."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from fleet.app.api.auth import get_franchise_context
from fleet.app.db.context import ResolvedContext
from fleet.app.db.models import Vehicle, VehicleIssue
from fleet.app.models.vehicles import IssueOut, VehicleSummary
from fleet.app.tenancy.resolver import validate_entity_in_franchise

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

ISSUE_ID_PREFIX = "issue-"


async def _vehicle_or_404(ctx: ResolvedContext, vehicle_id: str) -> Vehicle:
    vehicle = await validate_entity_in_franchise(ctx.scope, ctx.franchise_id, vehicle_id)
    if vehicle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found in your franchise",
        )
    return vehicle  # type: ignore[return-value]


@router.get("/{vehicle_id}", response_model=VehicleSummary)
async def get_vehicle(
    vehicle_id: str,
    ctx: Annotated[ResolvedContext, Depends(get_franchise_context)],
) -> VehicleSummary:
    """Get a vehicle by UUID or vehicle number."""
    vehicle = await _vehicle_or_404(ctx, vehicle_id)
    return VehicleSummary.model_validate(vehicle)


@router.get("/{vehicle_id}/issues/{issue_id}", response_model=IssueOut)
async def get_vehicle_issue(
    vehicle_id: str,
    issue_id: str,
    ctx: Annotated[ResolvedContext, Depends(get_franchise_context)],
) -> IssueOut:
    """Get one issue reported against a vehicle in the caller's franchise.

    Raises:
        HTTPException: 404 if the vehicle or issue is missing or belongs elsewhere
    """
    vehicle = await _vehicle_or_404(ctx, vehicle_id)

    raw_issue_id = issue_id.removeprefix(ISSUE_ID_PREFIX)
    try:
        issue_uuid = uuid.UUID(raw_issue_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found",
        ) from e

    issue = await ctx.scope.first(
        VehicleIssue,
        VehicleIssue.id == issue_uuid,
        VehicleIssue.vehicle_id == vehicle.id,
    )
    if issue is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Issue not found",
        )

    return IssueOut.model_validate(issue)
