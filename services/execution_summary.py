"""
Aggregates container outcomes of a plan and derives which completion
transitions are currently legal. Everything here is pure and recomputed on
every read; nothing is stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple, cast

from models.receive_plan import (
    PlanContainer,
    PlanContainerStatus,
    PlanStatus,
    ReceivedType,
    ReceivePlan,
)
from services.config_service import get_expected_end_epsilon
from services.overlap_validator import planned_duration


@dataclass(frozen=True)
class ExecutionSummary:
    total: int = 0
    received: int = 0
    rejected: int = 0
    waiting: int = 0
    problem: int = 0
    adjusted: int = 0

    @property
    def processed(self) -> int:
        return self.received + self.rejected

    @property
    def processed_fraction(self) -> float:
        if self.total == 0:
            return 0.0
        return self.processed / self.total


def calculate_summary(containers: Iterable[PlanContainer]) -> ExecutionSummary:
    total = received = rejected = waiting = problem = adjusted = 0
    for container in containers:
        if container.unassigned_at is not None:
            continue
        total += 1
        status = cast(PlanContainerStatus, container.status)
        if status == PlanContainerStatus.RECEIVED:
            received += 1
            if container.received_type == ReceivedType.PROBLEM:
                problem += 1
            elif container.received_type == ReceivedType.ADJUSTED_DOCUMENT:
                adjusted += 1
        elif status == PlanContainerStatus.REJECTED:
            rejected += 1
        else:
            waiting += 1
    return ExecutionSummary(total, received, rejected, waiting, problem, adjusted)


def should_enable_done(summary: ExecutionSummary) -> bool:
    # A plan with nothing processed cannot be DONE.
    return summary.total > 0 and summary.waiting == 0


def should_enable_pending(summary: ExecutionSummary) -> bool:
    return summary.rejected > 0 and summary.waiting > 0


def all_containers_waiting(summary: ExecutionSummary) -> bool:
    return summary.waiting == summary.total


def expected_end_time(
    plan: ReceivePlan,
    summary: ExecutionSummary,
    epsilon: Optional[float] = None,
) -> datetime:
    """
    Linear extrapolation of when execution finishes. Falls back to the planned
    end until execution has started and at least one container is processed.
    """
    execution_start = cast(Optional[datetime], plan.execution_start)
    processed = summary.processed_fraction
    if execution_start is None or processed <= 0:
        return cast(datetime, plan.planned_end)

    floor = get_expected_end_epsilon() if epsilon is None else epsilon
    return execution_start + planned_duration(plan) / max(processed, floor)


def partition_containers(
    containers: Iterable[PlanContainer],
) -> Tuple[List[PlanContainer], List[PlanContainer]]:
    """Split into (waiting, processed), keeping display order."""
    waiting: List[PlanContainer] = []
    processed: List[PlanContainer] = []
    for container in containers:
        if container.completed:
            processed.append(container)
        else:
            waiting.append(container)
    return waiting, processed


# ==================== PENDING PLAN MONITORING ====================

def pending_comparable_date(plan: ReceivePlan) -> Optional[datetime]:
    return cast(Optional[datetime], plan.pending_date or plan.execution_end or plan.updated_at)


def sort_pending_plans_by_recency(plans: Sequence[ReceivePlan]) -> List[ReceivePlan]:
    pending = [plan for plan in plans if plan.status == PlanStatus.PENDING]
    return sorted(
        pending,
        key=lambda plan: pending_comparable_date(plan) or datetime.min,
        reverse=True,
    )


def reorder_pending_plan_containers(containers: Sequence[PlanContainer]) -> List[PlanContainer]:
    """Rejected containers first; the rest keep their relative order."""
    return sorted(
        containers,
        key=lambda item: 0 if item.status == PlanContainerStatus.REJECTED else 1,
    )
