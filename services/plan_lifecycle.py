"""
Plan lifecycle state machine and per-container outcome recording.

    SCHEDULED -> IN_PROGRESS -> DONE
                      |      -> PENDING
                      +----> SCHEDULED (cancel, nothing processed yet)

PENDING has no outgoing transition here; reconciling a pending plan is left
to follow-up tooling.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, cast
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import (
    AlreadyTerminalError,
    AssignmentNotFoundError,
    GuardFailedError,
    PlanNotInProgressError,
)
from core.locks import PLAN_START_LOCK_KEY, KeyedLockRegistry, plan_lock_key
from core.timeutils import utc_now
from models.receive_plan import (
    PlanContainer,
    PlanContainerStatus,
    PlanStatus,
    ReceivedType,
    ReceivePlan,
)
from services.config_service import is_single_in_progress_plan
from services.execution_summary import (
    ExecutionSummary,
    all_containers_waiting,
    calculate_summary,
    should_enable_done,
    should_enable_pending,
)
from services.plan_store import PlanStore

log = logging.getLogger(__name__)


def check_guard(plan: ReceivePlan, target: PlanStatus, summary: ExecutionSummary) -> Optional[str]:
    """Reason the transition is refused, or None when it is allowed."""
    if not plan.can_transition_to(target):
        return "transition not allowed"
    if target == PlanStatus.IN_PROGRESS and summary.total == 0:
        return "plan has no containers"
    if target == PlanStatus.SCHEDULED and not all_containers_waiting(summary):
        return "containers have already been processed"
    if target == PlanStatus.DONE and not should_enable_done(summary):
        return f"{summary.waiting} container(s) still waiting"
    if target == PlanStatus.PENDING and not should_enable_pending(summary):
        return "pending requires at least one rejected and one waiting container"
    return None


class PlanLifecycle:
    def __init__(
        self,
        locks: KeyedLockRegistry,
        store: PlanStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.locks = locks
        self.store = store
        self.clock = clock

    def transition(self, plan_id: UUID, target: PlanStatus, db: Session) -> ReceivePlan:
        keys = [plan_lock_key(plan_id)]
        single_active = target == PlanStatus.IN_PROGRESS and is_single_in_progress_plan()
        if single_active:
            keys.append(PLAN_START_LOCK_KEY)

        with self.locks.hold_many(keys):
            plan = self.store.load(plan_id, db)
            current = plan.status_value
            summary = calculate_summary(plan.containers)

            reason = check_guard(plan, target, summary)
            if reason is None and single_active:
                running = [
                    other for other in self.store.list_by_status(db, PlanStatus.IN_PROGRESS)
                    if other.id != plan.id
                ]
                if running:
                    reason = f"plan {running[0].code} is already IN_PROGRESS"
            if reason is not None:
                raise GuardFailedError(current, target.value, reason)

            now = self.clock()
            if target == PlanStatus.IN_PROGRESS:
                plan.execution_start = now
            elif target == PlanStatus.SCHEDULED:
                plan.execution_start = None
            elif target == PlanStatus.DONE:
                plan.execution_end = now
            elif target == PlanStatus.PENDING:
                plan.pending_date = now

            plan.status = target
            self.store.save(db, plan)

        log.info("Plan %s moved %s -> %s", plan.code, current, target.value)
        return plan

    def record_outcome(
        self,
        assignment_id: UUID,
        outcome: PlanContainerStatus,
        db: Session,
        truck_no: Optional[str] = None,
        received_type: ReceivedType = ReceivedType.NORMAL,
        notes: Optional[str] = None,
    ) -> PlanContainer:
        if outcome not in (PlanContainerStatus.RECEIVED, PlanContainerStatus.REJECTED):
            raise ValueError(f"Outcome must be RECEIVED or REJECTED, got {outcome.value}")

        plan_id = cast(UUID, self.store.load_assignment(assignment_id, db).plan_id)
        with self.locks.hold(plan_lock_key(plan_id)):
            plan = self.store.load(plan_id, db)
            assignment = self.store.load_assignment(assignment_id, db)
            if assignment.unassigned_at is not None:
                raise AssignmentNotFoundError(assignment_id)
            if plan.status != PlanStatus.IN_PROGRESS:
                raise PlanNotInProgressError(str(plan.code), plan.status_value)
            if assignment.completed:
                raise AlreadyTerminalError(assignment_id, assignment.status_value)

            if outcome == PlanContainerStatus.RECEIVED:
                assignment.mark_received(self.clock(), truck_no, received_type, notes)
            else:
                assignment.mark_rejected(self.clock(), notes)
            self.store.save(db, assignment)

        log.info("Container assignment %s on plan %s marked %s", assignment_id, plan.code, outcome.value)
        return assignment
