"""
Plan Store: persistence of receive plans and their container assignments.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Set
from uuid import UUID, uuid4

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.exceptions import AssignmentNotFoundError, PlanNotFoundError
from core.timeutils import utc_now
from models.receive_plan import PlanContainer, PlanContainerStatus, PlanStatus, ReceivePlan
from services.config_service import get_plan_code_prefix

log = logging.getLogger(__name__)


class PlanStore:
    """Reads always go to the database; writes are single transactions."""

    @staticmethod
    def generate_code(at_time: Optional[datetime] = None) -> str:
        timestamp = (at_time or utc_now()).strftime("%Y%m%d")
        return f"{get_plan_code_prefix()}-{timestamp}-{uuid4().hex[:6].upper()}"

    def load(self, plan_id: UUID, db: Session) -> ReceivePlan:
        plan = (
            db.query(ReceivePlan)
            .options(selectinload(ReceivePlan.containers))
            .populate_existing()
            .filter(ReceivePlan.id == plan_id)
            .first()
        )
        if not plan:
            raise PlanNotFoundError(plan_id)
        return plan

    def list_by_status(self, db: Session, *statuses: PlanStatus) -> List[ReceivePlan]:
        query = db.query(ReceivePlan).options(selectinload(ReceivePlan.containers))
        if statuses:
            query = query.filter(ReceivePlan.status.in_(statuses))
        return query.order_by(ReceivePlan.planned_start.asc()).all()

    def load_assignment(self, assignment_id: UUID, db: Session) -> PlanContainer:
        assignment = (
            db.query(PlanContainer)
            .populate_existing()
            .filter(PlanContainer.id == assignment_id)
            .first()
        )
        if not assignment:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    def find_active_assignments(
        self, order_container_ids: Iterable[UUID], db: Session
    ) -> List[PlanContainer]:
        """Assignments that keep a container from being planned again."""
        ids = list(order_container_ids)
        if not ids:
            return []
        return (
            db.query(PlanContainer)
            .join(ReceivePlan, PlanContainer.plan_id == ReceivePlan.id)
            .filter(
                PlanContainer.order_container_id.in_(ids),
                PlanContainer.unassigned_at.is_(None),
                or_(
                    ReceivePlan.status != PlanStatus.DONE,
                    PlanContainer.status == PlanContainerStatus.RECEIVED,
                ),
            )
            .all()
        )

    def find_active_assignment(self, order_container_id: UUID, db: Session) -> Optional[PlanContainer]:
        matches = self.find_active_assignments([order_container_id], db)
        return matches[0] if matches else None

    def planned_container_ids(self, db: Session) -> Set[UUID]:
        """Containers that are either actively planned or already received."""
        active = (
            db.query(PlanContainer.order_container_id)
            .join(ReceivePlan, PlanContainer.plan_id == ReceivePlan.id)
            .filter(
                PlanContainer.unassigned_at.is_(None),
                ReceivePlan.status != PlanStatus.DONE,
            )
        )
        received = db.query(PlanContainer.order_container_id).filter(
            PlanContainer.status == PlanContainerStatus.RECEIVED,
            PlanContainer.unassigned_at.is_(None),
        )
        return {row[0] for row in active.union(received).all()}

    def save(self, db: Session, *entities) -> None:
        try:
            for entity in entities:
                db.add(entity)
            db.commit()
        except SQLAlchemyError:
            log.error("Plan store write failed, rolling back", exc_info=True)
            db.rollback()
            raise
        for entity in entities:
            db.refresh(entity)

    def delete(self, db: Session, entity) -> None:
        try:
            db.delete(entity)
            db.commit()
        except SQLAlchemyError:
            log.error("Plan store delete failed, rolling back", exc_info=True)
            db.rollback()
            raise
