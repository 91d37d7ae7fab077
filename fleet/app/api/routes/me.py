"""Current user's franchise context endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from fleet.app.api.auth import get_franchise_context
from fleet.app.db.context import ResolvedContext
from fleet.app.models.context import ContextResponse
from fleet.app.tenancy.roles import is_manager_role

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/context", response_model=ContextResponse)
async def get_context(
    ctx: Annotated[ResolvedContext, Depends(get_franchise_context)],
) -> ContextResponse:
    """Return the franchise and role the caller is acting under."""
    return ContextResponse(
        user_id=ctx.identity_id,
        franchise_id=ctx.franchise_id,
        role=ctx.role,
        is_manager=is_manager_role(ctx.role),
    )
