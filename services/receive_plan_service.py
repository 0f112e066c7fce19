# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, cast
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import AlreadyAssignedError, EmptyContainersError, NotScheduledError
from core.locks import (
    PLAN_WINDOW_LOCK_KEY,
    KeyedLockRegistry,
    container_lock_key,
    plan_lock_key,
)
from core.timeutils import to_naive_utc, utc_now
from models.order_container import OrderContainer
from models.receive_plan import (
    LIVE_PLAN_STATUSES,
    PlanContainer,
    PlanContainerStatus,
    PlanStatus,
    ReceivedType,
    ReceivePlan,
)
from services.assignment_manager import AssignmentManager
from services.container_registry import ContainerRegistry
from services.execution_summary import (
    ExecutionSummary,
    calculate_summary,
    expected_end_time,
    should_enable_done,
    should_enable_pending,
    sort_pending_plans_by_recency,
)
from services.overlap_validator import deadline_warnings, ensure_no_overlap, validate_range
from services.plan_lifecycle import PlanLifecycle
from services.plan_store import PlanStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionReport:
    summary: ExecutionSummary
    expected_end: datetime
    can_mark_done: bool
    can_mark_pending: bool


class ReceivePlanService:
    """Entry point for every receive plan operation."""

    def __init__(
        self,
        store: Optional[PlanStore] = None,
        locks: Optional[KeyedLockRegistry] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store or PlanStore()
        self.locks = locks or KeyedLockRegistry()
        self.clock = clock
        self.assignments = AssignmentManager(self.locks, self.store, clock)
        self.lifecycle = PlanLifecycle(self.locks, self.store, clock)

    # ==================== READS ====================

    def get_plan(self, plan_id: UUID, db: Session) -> ReceivePlan:
        """Fresh read of a plan. Safe to poll."""
        plan = self.store.load(plan_id, db)
        self.assignments.reconcile(plan)
        return plan

    def list_plans(self, db: Session, status: Optional[PlanStatus] = None) -> List[ReceivePlan]:
        if status is None:
            return self.store.list_by_status(db)
        plans = self.store.list_by_status(db, status)
        if status == PlanStatus.PENDING:
            # Most recently suspended first.
            return sort_pending_plans_by_recency(plans)
        return plans

    def list_unplanned_containers(self, db: Session) -> List[OrderContainer]:
        return ContainerRegistry.list_unplanned(self.store.planned_container_ids(db), db)

    def get_execution_summary(self, plan_id: UUID, db: Session) -> ExecutionReport:
        plan = self.get_plan(plan_id, db)
        summary = calculate_summary(plan.containers)
        return ExecutionReport(
            summary=summary,
            expected_end=expected_end_time(plan, summary),
            can_mark_done=should_enable_done(summary),
            can_mark_pending=should_enable_pending(summary),
        )

    def plan_warnings(self, plan: ReceivePlan) -> List[str]:
        containers = [
            item.order_container for item in plan.active_containers
            if item.order_container is not None
        ]
        return deadline_warnings(cast(datetime, plan.planned_end), containers)

    # ==================== PLAN CRUD ====================

    def create_plan(
        self,
        planned_start: datetime,
        planned_end: datetime,
        container_ids: Sequence[UUID],
        db: Session,
        equipment_booked: bool = False,
        port_notified: bool = False,
    ) -> ReceivePlan:
        start = cast(datetime, to_naive_utc(planned_start))
        end = cast(datetime, to_naive_utc(planned_end))

        range_error = validate_range(start, end)
        if range_error:
            raise range_error
        if not container_ids:
            raise EmptyContainersError()

        ordered_ids = list(dict.fromkeys(container_ids))
        keys = [PLAN_WINDOW_LOCK_KEY] + [container_lock_key(item) for item in ordered_ids]
        with self.locks.hold_many(keys):
            ensure_no_overlap(start, end, self.store.list_by_status(db, *LIVE_PLAN_STATUSES))

            ContainerRegistry.get_many(ordered_ids, db)
            taken = self.store.find_active_assignments(ordered_ids, db)
            if taken:
                raise AlreadyAssignedError(
                    cast(UUID, taken[0].order_container_id),
                    taken[0].plan.code if taken[0].plan is not None else None,
                )

            now = self.clock()
            plan = ReceivePlan(
                code=self.store.generate_code(now),
                planned_start=start,
                planned_end=end,
                equipment_booked=equipment_booked,
                port_notified=port_notified,
                status=PlanStatus.SCHEDULED,
            )
            for sequence, order_container_id in enumerate(ordered_ids, start=1):
                plan.containers.append(
                    PlanContainer(
                        order_container_id=order_container_id,
                        sequence=sequence,
                        assigned_at=now,
                        status=PlanContainerStatus.WAITING,
                        received_type=ReceivedType.NORMAL,
                    )
                )
            # Plan and assignments commit together or not at all.
            self.store.save(db, plan)

        log.info("Created receive plan %s with %d container(s)", plan.code, len(ordered_ids))
        return plan

    def update_plan_header(
        self,
        plan_id: UUID,
        db: Session,
        planned_start: Optional[datetime] = None,
        planned_end: Optional[datetime] = None,
        equipment_booked: Optional[bool] = None,
        port_notified: Optional[bool] = None,
    ) -> ReceivePlan:
        with self.locks.hold_many([plan_lock_key(plan_id), PLAN_WINDOW_LOCK_KEY]):
            plan = self.store.load(plan_id, db)
            if plan.status != PlanStatus.SCHEDULED:
                raise NotScheduledError(str(plan.code), plan.status_value, "edited")

            start = to_naive_utc(planned_start) or cast(datetime, plan.planned_start)
            end = to_naive_utc(planned_end) or cast(datetime, plan.planned_end)
            others = self.store.list_by_status(db, *LIVE_PLAN_STATUSES)
            ensure_no_overlap(start, end, others, exclude_plan_id=cast(UUID, plan.id))

            plan.planned_start = start
            plan.planned_end = end
            if equipment_booked is not None:
                plan.equipment_booked = equipment_booked
            if port_notified is not None:
                plan.port_notified = port_notified
            self.store.save(db, plan)

        log.info("Updated header of plan %s", plan.code)
        return plan

    def delete_plan(self, plan_id: UUID, db: Session) -> None:
        with self.locks.hold(plan_lock_key(plan_id)):
            plan = self.store.load(plan_id, db)
            if plan.status != PlanStatus.SCHEDULED:
                raise NotScheduledError(str(plan.code), plan.status_value, "deleted")
            code = plan.code
            self.store.delete(db, plan)
            self.assignments.forget_plan(plan_id)

        log.info("Deleted receive plan %s", code)

    # ==================== ASSIGNMENTS & LIFECYCLE ====================

    def assign_container(self, plan_id: UUID, order_container_id: UUID, db: Session) -> PlanContainer:
        return self.assignments.assign(plan_id, order_container_id, db)

    def unassign_container(self, plan_id: UUID, assignment_id: UUID, db: Session) -> None:
        self.assignments.unassign(plan_id, assignment_id, db)

    def transition_plan(self, plan_id: UUID, target: PlanStatus, db: Session) -> ReceivePlan:
        return self.lifecycle.transition(plan_id, target, db)

    def record_container_outcome(
        self,
        assignment_id: UUID,
        outcome: PlanContainerStatus,
        db: Session,
        truck_no: Optional[str] = None,
        received_type: ReceivedType = ReceivedType.NORMAL,
        notes: Optional[str] = None,
    ) -> PlanContainer:
        return self.lifecycle.record_outcome(
            assignment_id,
            outcome,
            db,
            truck_no=truck_no,
            received_type=received_type,
            notes=notes,
        )
