"""Manager maintenance-due endpoint."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from fleet.app.api.auth import require_manager
from fleet.app.config import get_settings
from fleet.app.db.context import ResolvedContext
from fleet.app.maintenance.due import compute_maintenance_due
from fleet.app.models.maintenance import MaintenanceDueResponse

router = APIRouter(prefix="/manager", tags=["maintenance"])


@router.get("/maintenance-due", response_model=MaintenanceDueResponse)
async def maintenance_due(
    ctx: Annotated[ResolvedContext, Depends(require_manager)],
) -> MaintenanceDueResponse:
    """Report open scheduled maintenance that is due by date or mileage."""
    return await compute_maintenance_due(
        ctx.scope,
        today=datetime.now(timezone.utc).date(),
        limit=get_settings().maintenance_due_limit,
    )
