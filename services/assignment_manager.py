"""
Container-to-plan membership.

Two invariants are enforced here:

* a container has at most one active assignment across all plans that are
  not DONE;
* a SCHEDULED or IN_PROGRESS plan never drops to zero containers through
  unassignment (the plan has to be deleted as a whole instead).

Containers are only added while a plan is SCHEDULED. Removal is also allowed
while it is IN_PROGRESS, where the row is detached rather than deleted.

Mutations on one plan are serialized through the shared lock registry. The
manager also keeps a pending-removal buffer per plan: an assignment that was
just removed is treated as gone until a fresh read of the plan confirms it,
so the last-container check never trusts a stale stored count.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Set, cast
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import (
    AlreadyAssignedError,
    AlreadyTerminalError,
    AssignmentNotFoundError,
    LastContainerError,
    PlanNotOpenError,
)
from core.locks import KeyedLockRegistry, container_lock_key, plan_lock_key
from core.timeutils import utc_now
from models.receive_plan import (
    OPEN_PLAN_STATUSES,
    PlanContainer,
    PlanContainerStatus,
    PlanStatus,
    ReceivedType,
    ReceivePlan,
)
from services.container_registry import ContainerRegistry
from services.plan_store import PlanStore

log = logging.getLogger(__name__)


class AssignmentManager:
    def __init__(
        self,
        locks: KeyedLockRegistry,
        store: PlanStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.locks = locks
        self.store = store
        self.clock = clock
        self._pending_guard = threading.Lock()
        self._pending: Dict[UUID, Set[UUID]] = {}

    # ==================== PENDING REMOVALS ====================

    def pending_removals(self, plan_id: UUID) -> Set[UUID]:
        with self._pending_guard:
            return set(self._pending.get(plan_id, set()))

    def mark_pending(self, plan_id: UUID, assignment_id: UUID) -> None:
        with self._pending_guard:
            self._pending.setdefault(plan_id, set()).add(assignment_id)

    def discard_pending(self, plan_id: UUID, assignment_id: UUID) -> None:
        with self._pending_guard:
            entries = self._pending.get(plan_id)
            if not entries:
                return
            entries.discard(assignment_id)
            if not entries:
                self._pending.pop(plan_id, None)

    def forget_plan(self, plan_id: UUID) -> None:
        with self._pending_guard:
            self._pending.pop(plan_id, None)

    def reconcile(self, plan: ReceivePlan) -> None:
        """Drop pending entries that a fresh read no longer contains."""
        plan_id = cast(UUID, plan.id)
        still_present = {cast(UUID, item.id) for item in plan.active_containers}
        with self._pending_guard:
            entries = self._pending.get(plan_id)
            if not entries:
                return
            entries.intersection_update(still_present)
            if not entries:
                self._pending.pop(plan_id, None)

    def effective_count(self, plan: ReceivePlan) -> int:
        pending = self.pending_removals(cast(UUID, plan.id))
        return sum(1 for item in plan.active_containers if item.id not in pending)

    # ==================== MUTATIONS ====================

    def assign(self, plan_id: UUID, order_container_id: UUID, db: Session) -> PlanContainer:
        keys = [plan_lock_key(plan_id), container_lock_key(order_container_id)]
        with self.locks.hold_many(keys):
            plan = self.store.load(plan_id, db)
            self.reconcile(plan)

            # Running plans only lose containers, they never gain them.
            if plan.status != PlanStatus.SCHEDULED:
                raise PlanNotOpenError(str(plan.code), plan.status_value)

            ContainerRegistry.get_many([order_container_id], db)

            existing = self.store.find_active_assignment(order_container_id, db)
            if existing is not None:
                owner = existing.plan.code if existing.plan is not None else None
                raise AlreadyAssignedError(order_container_id, owner)

            assignment = PlanContainer(
                plan_id=plan.id,
                order_container_id=order_container_id,
                sequence=plan.next_sequence(),
                assigned_at=self.clock(),
                status=PlanContainerStatus.WAITING,
                received_type=ReceivedType.NORMAL,
            )
            self.store.save(db, assignment)

        log.info("Assigned container %s to plan %s", order_container_id, plan.code)
        return assignment

    def unassign(self, plan_id: UUID, assignment_id: UUID, db: Session) -> None:
        with self.locks.hold(plan_lock_key(plan_id)):
            plan = self.store.load(plan_id, db)
            self.reconcile(plan)

            if plan.status not in OPEN_PLAN_STATUSES:
                raise PlanNotOpenError(str(plan.code), plan.status_value)

            pending = self.pending_removals(plan_id)
            assignment = next(
                (item for item in plan.active_containers if item.id == assignment_id),
                None,
            )
            if assignment is None or assignment_id in pending:
                raise AssignmentNotFoundError(assignment_id)

            if self.effective_count(plan) <= 1:
                raise LastContainerError(str(plan.code))

            in_progress = plan.status == PlanStatus.IN_PROGRESS
            if in_progress and assignment.completed:
                raise AlreadyTerminalError(assignment_id, assignment.status_value)

            self.mark_pending(plan_id, assignment_id)
            try:
                if in_progress:
                    # Keep the row for execution history.
                    assignment.unassigned_at = self.clock()
                    self.store.save(db, assignment)
                else:
                    self.store.delete(db, assignment)
            except Exception:
                self.discard_pending(plan_id, assignment_id)
                raise

            # Committed, so a fresh read clears the entry.
            self.reconcile(self.store.load(plan_id, db))

        log.info("Unassigned %s from plan %s", assignment_id, plan.code)
