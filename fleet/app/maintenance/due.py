"""Maintenance-due report over open scheduled tasks."""

from datetime import date

from sqlalchemy import false, or_

from fleet.app.db.models import ScheduledMaintenance, Vehicle
from fleet.app.models.maintenance import DueItem, DueReason, MaintenanceDueResponse
from fleet.app.tenancy.scope import FranchiseScope

# Sort key for rows with no mileage target; keeps them after any mileage overage
_NO_MILEAGE_OVERAGE = -999_999


def _due_reason(by_date: bool, by_miles: bool) -> DueReason | None:
    if by_date and by_miles:
        return "date+mileage"
    if by_date:
        return "date"
    if by_miles:
        return "mileage"
    return None


def _sort_key(item: DueItem) -> tuple[int, date]:
    overage = (
        item.current_mileage - item.due_mileage
        if item.due_mileage is not None
        else _NO_MILEAGE_OVERAGE
    )
    # Most overdue first, then earliest due date
    return (-overage, item.due_date or date.min)


async def compute_maintenance_due(
    scope: FranchiseScope, today: date, limit: int = 50
) -> MaintenanceDueResponse:
    """Find open scheduled tasks that are due by date or by odometer.

    Args:
        scope: Franchise scope
        today: Reference date for date-based due checks
        limit: Maximum number of due items returned

    Returns:
        Count of distinct vehicles with anything due, plus the most overdue items
    """
    rows = await scope.select(
        ScheduledMaintenance,
        ScheduledMaintenance.vehicle_id.is_not(None),
        or_(ScheduledMaintenance.completed.is_(None), ScheduledMaintenance.completed == false()),
    )
    vehicles = {vehicle.id: vehicle for vehicle in await scope.select(Vehicle)}

    due_items: list[DueItem] = []
    for row in rows:
        vehicle = vehicles.get(row.vehicle_id)
        if vehicle is None:
            continue

        current_mileage = vehicle.current_mileage or 0
        by_date = row.due_date is not None and row.due_date <= today
        by_miles = row.due_mileage is not None and row.due_mileage <= current_mileage
        reason = _due_reason(by_date, by_miles)
        if reason is None:
            continue

        due_items.append(
            DueItem(
                id=row.id,
                vehicle_id=vehicle.id,
                vehicle_number=vehicle.vehicle_number,
                current_mileage=current_mileage,
                maintenance_type=row.maintenance_type,
                description=row.description,
                due_date=row.due_date,
                due_mileage=row.due_mileage,
                due_reason=reason,
            )
        )

    vehicles_due = len({item.vehicle_id for item in due_items})
    due_items.sort(key=_sort_key)

    return MaintenanceDueResponse(
        vehicles_due_for_service=vehicles_due,
        due_items=due_items[:limit],
    )
