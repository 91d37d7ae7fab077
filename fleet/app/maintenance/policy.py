"""Maintenance policy seeding, configuration and propagation.

Policy lifecycle per (franchise, maintenance_type):

    undiscovered -> seeded (active, null intervals) -> configured -> applied

`seed_policies` creates missing rows from the types already used in the
schedule. `upsert_policy` is the manager configuration step.
`apply_policies` copies configured defaults onto open schedule rows whose
intervals are still blank. Mileage policies fill rows with no
`interval_miles`; days-only policies fill rows blank on both intervals.
Values already present are never overwritten, so repeated runs update
nothing new.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import false, func, or_

from fleet.app.db.models import MaintenancePolicy, ScheduledMaintenance
from fleet.app.models.policy import PolicyUpdate
from fleet.app.tenancy.scope import FranchiseScope
from fleet.app.utils.logging import StructuredTenancyLogger
from fleet.app.utils.metrics import PrometheusTenancyMetrics

_structured_logger = StructuredTenancyLogger()
_metrics = PrometheusTenancyMetrics()

POLICY_CONFLICT_COLUMNS = ("franchise_id", "maintenance_type")


@dataclass
class ApplyResult:
    """Outcome of applying policy defaults to the schedule."""

    updated_count: int


@dataclass
class SeedResult:
    """Outcome of seeding policies from scheduled maintenance types."""

    seeded_count: int
    types: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _open_rows_filter():
    return or_(ScheduledMaintenance.completed.is_(None), ScheduledMaintenance.completed == false())


def _blank_interval_fill(policy: MaintenancePolicy) -> tuple[dict[str, Any], list[Any]] | None:
    """Values to write and the blank-interval predicates for one policy.

    Returns None when the policy has no defaults to propagate.
    """
    if policy.default_interval_miles is not None:
        return (
            {
                "interval_miles": policy.default_interval_miles,
                "interval_days": policy.default_interval_days,
            },
            [ScheduledMaintenance.interval_miles.is_(None)],
        )

    if policy.default_interval_days is not None:
        # Days-only: the row must be blank on both axes or reruns would count it again
        return (
            {"interval_days": policy.default_interval_days},
            [
                ScheduledMaintenance.interval_miles.is_(None),
                ScheduledMaintenance.interval_days.is_(None),
            ],
        )

    return None


async def apply_policies(scope: FranchiseScope) -> ApplyResult:
    """Fill blank schedule intervals from active, configured policies.

    Schedule types are matched after trimming, the same way seeding
    discovers them. Runs in a single transaction. A failure on any policy
    rolls back every update and propagates as BackendUnavailableError.
    """
    updated = 0

    async with scope.transaction():
        policies = await scope.select(
            MaintenancePolicy,
            MaintenancePolicy.is_active.is_(True),
            order_by=(MaintenancePolicy.maintenance_type,),
        )

        for policy in policies:
            fill = _blank_interval_fill(policy)
            if fill is None:
                continue

            values, blank_filters = fill
            updated += await scope.update(
                ScheduledMaintenance,
                {**values, "updated_at": _utcnow()},
                func.trim(ScheduledMaintenance.maintenance_type) == policy.maintenance_type,
                _open_rows_filter(),
                *blank_filters,
            )

    _metrics.inc_rows_updated(updated)
    _structured_logger.log_policy_run("apply", scope.franchise_id, updated)
    return ApplyResult(updated_count=updated)


def _distinct_types(raw_types: list[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for raw in raw_types:
        cleaned = str(raw or "").strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


async def seed_policies(scope: FranchiseScope) -> SeedResult:
    """Create an active, unconfigured policy for every scheduled maintenance type.

    Existing policies for a type are left exactly as they are.
    """
    raw_types = await scope.values(
        ScheduledMaintenance.maintenance_type,
        order_by=(ScheduledMaintenance.created_at, ScheduledMaintenance.id),
    )
    types = _distinct_types(raw_types)

    if not types:
        _structured_logger.log_policy_run("seed", scope.franchise_id, 0, types=[])
        return SeedResult(seeded_count=0, types=[])

    now = _utcnow()
    rows = [
        {
            "id": uuid.uuid4(),
            "maintenance_type": maintenance_type,
            "default_interval_miles": None,
            "default_interval_days": None,
            "is_active": True,
            "updated_at": now,
        }
        for maintenance_type in types
    ]

    async with scope.transaction():
        await scope.insert_if_absent(MaintenancePolicy, rows, POLICY_CONFLICT_COLUMNS)

    _metrics.inc_types_seeded(len(types))
    _structured_logger.log_policy_run("seed", scope.franchise_id, len(types), types=types)
    return SeedResult(seeded_count=len(types), types=types)


async def list_policies(scope: FranchiseScope) -> list[MaintenancePolicy]:
    """List every policy for the franchise, ordered by maintenance type."""
    return await scope.select(MaintenancePolicy, order_by=(MaintenancePolicy.maintenance_type,))


async def upsert_policy(scope: FranchiseScope, update: PolicyUpdate) -> MaintenancePolicy:
    """Create or reconfigure the policy for one maintenance type."""
    row = {
        "id": uuid.uuid4(),
        "maintenance_type": update.maintenance_type,
        "default_interval_miles": update.default_interval_miles,
        "default_interval_days": update.default_interval_days,
        "is_active": update.is_active,
        "updated_at": _utcnow(),
    }

    async with scope.transaction():
        policy = await scope.upsert(
            MaintenancePolicy,
            row,
            POLICY_CONFLICT_COLUMNS,
            update_columns=(
                "default_interval_miles",
                "default_interval_days",
                "is_active",
                "updated_at",
            ),
        )

    return policy
