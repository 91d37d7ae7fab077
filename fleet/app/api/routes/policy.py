"""Maintenance policy endpoints - list, configure, seed and apply."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from fleet.app.api.auth import require_manager
from fleet.app.db.context import ResolvedContext
from fleet.app.maintenance.policy import (
    apply_policies,
    list_policies,
    seed_policies,
    upsert_policy,
)
from fleet.app.models.policy import ApplyResponse, PolicyOut, PolicyUpdate, SeedResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manager/maintenance-policy", tags=["maintenance-policy"])


@router.get("", response_model=list[PolicyOut])
async def get_policies(
    ctx: Annotated[ResolvedContext, Depends(require_manager)],
) -> list[PolicyOut]:
    """List maintenance policies for the caller's franchise."""
    policies = await list_policies(ctx.scope)
    return [PolicyOut.model_validate(policy) for policy in policies]


@router.post("", response_model=PolicyOut)
async def save_policy(
    request: PolicyUpdate,
    ctx: Annotated[ResolvedContext, Depends(require_manager)],
) -> PolicyOut:
    """Create or update the policy for one maintenance type.

    Args:
        request: Policy configuration
        ctx: Resolved franchise context (manager)

    Returns:
        Stored policy
    """
    policy = await upsert_policy(ctx.scope, request)

    logger.info(
        f"[POST /manager/maintenance-policy] franchise_id={ctx.franchise_id}, "
        f"type={policy.maintenance_type}"
    )

    return PolicyOut.model_validate(policy)


@router.post("/apply", response_model=ApplyResponse)
async def apply(
    ctx: Annotated[ResolvedContext, Depends(require_manager)],
) -> ApplyResponse:
    """Fill blank intervals on open scheduled maintenance from policy defaults."""
    result = await apply_policies(ctx.scope)
    return ApplyResponse(updated=result.updated_count)


@router.post("/seed", response_model=SeedResponse)
async def seed(
    ctx: Annotated[ResolvedContext, Depends(require_manager)],
) -> SeedResponse:
    """Create unconfigured policies for every scheduled maintenance type."""
    result = await seed_policies(ctx.scope)
    return SeedResponse(seeded=result.seeded_count, types=result.types)
