"""
Domain errors raised by the receive planning engine.

Every error is a business-rule violation the caller has to react to, so each
one carries a stable ``code`` and the HTTP status the API layer maps it to.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID


class PlanningError(Exception):
    """Base class for all receive planning errors."""

    code = "PLANNING_ERROR"
    status_code = 400

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        payload.update({key: str(value) if value is not None else None for key, value in self.context.items()})
        return payload


class PlanValidationError(PlanningError):
    status_code = 422


class InvalidRangeError(PlanValidationError):
    code = "INVALID_RANGE"

    def __init__(self, planned_start: datetime, planned_end: datetime) -> None:
        super().__init__(
            "End time must be after start time",
            planned_start=planned_start.isoformat(),
            planned_end=planned_end.isoformat(),
        )


class OverlapError(PlanValidationError):
    code = "OVERLAP"
    status_code = 409

    def __init__(
        self,
        plan_id: Optional[UUID],
        plan_code: str,
        window_start: datetime,
        window_end: datetime,
    ) -> None:
        super().__init__(
            f"Plan time overlaps with existing plan {plan_code}",
            conflicting_plan_id=plan_id,
            conflicting_plan_code=plan_code,
            conflicting_start=window_start.isoformat(),
            conflicting_end=window_end.isoformat(),
        )
        self.plan_id = plan_id
        self.plan_code = plan_code
        self.window_start = window_start
        self.window_end = window_end


class EmptyContainersError(PlanValidationError):
    code = "EMPTY_CONTAINERS"

    def __init__(self) -> None:
        super().__init__("At least one container must be selected")


class AlreadyAssignedError(PlanningError):
    code = "ALREADY_ASSIGNED"
    status_code = 409

    def __init__(self, order_container_id: UUID, plan_code: Optional[str] = None) -> None:
        where = f" to plan {plan_code}" if plan_code else ""
        super().__init__(
            f"Container {order_container_id} is already assigned{where}",
            order_container_id=order_container_id,
            plan_code=plan_code,
        )


class LastContainerError(PlanningError):
    code = "LAST_CONTAINER"
    status_code = 409

    def __init__(self, plan_code: str) -> None:
        super().__init__(
            f"Cannot remove the last container from plan {plan_code}; delete the plan instead",
            plan_code=plan_code,
        )


class GuardFailedError(PlanningError):
    code = "GUARD_FAILED"
    status_code = 409

    def __init__(self, current: str, target: str, reason: str) -> None:
        super().__init__(
            f"Cannot move plan from {current} to {target}: {reason}",
            current_status=current,
            target_status=target,
        )


class NotScheduledError(PlanningError):
    code = "NOT_SCHEDULED"
    status_code = 409

    def __init__(self, plan_code: str, status: str, action: str) -> None:
        super().__init__(
            f"Only SCHEDULED plans can be {action}; plan {plan_code} is {status}",
            plan_code=plan_code,
            status=status,
        )


class PlanNotOpenError(PlanningError):
    code = "PLAN_NOT_OPEN"
    status_code = 409

    def __init__(self, plan_code: str, status: str) -> None:
        super().__init__(
            f"Containers of plan {plan_code} cannot be changed while it is {status}",
            plan_code=plan_code,
            status=status,
        )


class PlanNotInProgressError(PlanningError):
    code = "PLAN_NOT_IN_PROGRESS"
    status_code = 409

    def __init__(self, plan_code: str, status: str) -> None:
        super().__init__(
            f"Plan {plan_code} must be IN_PROGRESS to record outcomes. Current: {status}",
            plan_code=plan_code,
            status=status,
        )


class AlreadyTerminalError(PlanningError):
    code = "ALREADY_TERMINAL"
    status_code = 409

    def __init__(self, assignment_id: UUID, status: str) -> None:
        super().__init__(
            f"Container assignment {assignment_id} is already {status}",
            assignment_id=assignment_id,
            status=status,
        )


class PlanNotFoundError(PlanningError):
    code = "PLAN_NOT_FOUND"
    status_code = 404

    def __init__(self, plan_id: UUID) -> None:
        super().__init__("Plan not found", plan_id=plan_id)


class AssignmentNotFoundError(PlanningError):
    code = "ASSIGNMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, assignment_id: UUID) -> None:
        super().__init__("Container assignment not found", assignment_id=assignment_id)


class ContainerNotFoundError(PlanningError):
    code = "CONTAINER_NOT_FOUND"
    status_code = 404

    def __init__(self, order_container_ids) -> None:
        ids = ", ".join(str(item) for item in order_container_ids)
        super().__init__(f"Container not found: {ids}", order_container_ids=ids)
