"""
Time window validation for receive plans.

Windows are half-open, ``[start, end)``: a plan ending at 17:00 and a plan
starting at 17:00 do not conflict. A plan keeps its planned window while it
runs, whenever execution actually started, so cancelling it back to SCHEDULED
never lands on another plan.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, cast
from uuid import UUID

from core.exceptions import InvalidRangeError, OverlapError, PlanValidationError
from models.order_container import OrderContainer
from models.receive_plan import PlanStatus, ReceivePlan


def windows_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    return start1 < end2 and start2 < end1


def validate_range(planned_start: datetime, planned_end: datetime) -> Optional[InvalidRangeError]:
    if planned_end <= planned_start:
        return InvalidRangeError(planned_start, planned_end)
    return None


def find_overlap(
    planned_start: datetime,
    planned_end: datetime,
    existing_plans: Iterable[ReceivePlan],
    exclude_plan_id: Optional[UUID] = None,
) -> Optional[PlanValidationError]:
    """Return the first validation error for the candidate window, or None."""
    range_error = validate_range(planned_start, planned_end)
    if range_error:
        return range_error

    for plan in existing_plans:
        if plan.status == PlanStatus.DONE:
            continue
        if exclude_plan_id is not None and plan.id == exclude_plan_id:
            continue

        other_start = cast(datetime, plan.planned_start)
        other_end = cast(datetime, plan.planned_end)
        if windows_overlap(planned_start, planned_end, other_start, other_end):
            return OverlapError(
                cast(Optional[UUID], plan.id),
                str(plan.code),
                other_start,
                other_end,
            )

    return None


def ensure_no_overlap(
    planned_start: datetime,
    planned_end: datetime,
    existing_plans: Iterable[ReceivePlan],
    exclude_plan_id: Optional[UUID] = None,
) -> None:
    error = find_overlap(planned_start, planned_end, existing_plans, exclude_plan_id)
    if error:
        raise error


def deadline_warnings(planned_end: datetime, containers: Iterable[OrderContainer]) -> List[str]:
    """Non-blocking warnings for containers whose deadlines fall before the plan end."""
    warnings: List[str] = []
    for container in containers:
        extract_to = cast(Optional[datetime], container.extract_to)
        if extract_to is not None and planned_end > extract_to:
            warnings.append(
                f"Container {container.container_no}: Extraction deadline "
                f"({extract_to.date().isoformat()}) exceeded by plan end time"
            )

        yard_free_to = cast(Optional[datetime], container.yard_free_to)
        if yard_free_to is not None and planned_end > yard_free_to:
            warnings.append(
                f"Container {container.container_no}: Free storage deadline "
                f"({yard_free_to.date().isoformat()}) exceeded by plan end time"
            )
    return warnings


def planned_duration(plan: ReceivePlan) -> timedelta:
    return cast(datetime, plan.planned_end) - cast(datetime, plan.planned_start)
