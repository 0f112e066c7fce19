"""
Receive plan models: the plan header and its container assignments.
"""
from __future__ import annotations

# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import List, Optional, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base
from core.timeutils import utc_now


class PlanStatus(PyEnum):
    """Plan status. DONE is terminal; PENDING waits on follow-up tooling."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING = "PENDING"
    DONE = "DONE"


class PlanContainerStatus(PyEnum):
    WAITING = "WAITING"
    RECEIVED = "RECEIVED"
    REJECTED = "REJECTED"


class ReceivedType(PyEnum):
    NORMAL = "NORMAL"
    PROBLEM = "PROBLEM"
    ADJUSTED_DOCUMENT = "ADJUSTED_DOCUMENT"


# Plan-level transitions. Guards live in services.plan_lifecycle.
VALID_PLAN_TRANSITIONS = {
    PlanStatus.SCHEDULED: [PlanStatus.IN_PROGRESS],
    PlanStatus.IN_PROGRESS: [
        PlanStatus.SCHEDULED,
        PlanStatus.DONE,
        PlanStatus.PENDING,
    ],
    PlanStatus.PENDING: [],
    PlanStatus.DONE: [],  # Terminal state
}

OPEN_PLAN_STATUSES = (PlanStatus.SCHEDULED, PlanStatus.IN_PROGRESS)
LIVE_PLAN_STATUSES = (PlanStatus.SCHEDULED, PlanStatus.IN_PROGRESS, PlanStatus.PENDING)
TERMINAL_CONTAINER_STATUSES = (PlanContainerStatus.RECEIVED, PlanContainerStatus.REJECTED)


class ReceivePlan(Base):
    """
    A scheduled window during which a set of containers is received at the
    yard.
    """
    __tablename__ = "receive_plans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    code = Column(String(40), nullable=False, unique=True, index=True)

    planned_start = Column(DateTime, nullable=False)
    planned_end = Column(DateTime, nullable=False)
    execution_start = Column(DateTime, nullable=True)
    execution_end = Column(DateTime, nullable=True)
    pending_date = Column(DateTime, nullable=True)

    equipment_booked = Column(Boolean, nullable=False, default=False)
    port_notified = Column(Boolean, nullable=False, default=False)

    status = Column(
        Enum(PlanStatus, native_enum=False),
        nullable=False,
        default=PlanStatus.SCHEDULED,
        index=True,
    )

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    containers = relationship(
        "PlanContainer",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanContainer.sequence",
    )

    @property
    def status_value(self) -> str:
        return cast(PlanStatus, self.status).value

    @property
    def active_containers(self) -> List["PlanContainer"]:
        """Assignments still attached to the plan (soft-detached rows excluded)."""
        return [item for item in self.containers if item.unassigned_at is None]

    def next_sequence(self) -> int:
        return max((item.sequence or 0 for item in self.containers), default=0) + 1

    def can_transition_to(self, new_status: PlanStatus) -> bool:
        current_status = cast(PlanStatus, self.status)
        return new_status in VALID_PLAN_TRANSITIONS.get(current_status, [])


class PlanContainer(Base):
    """Assignment of one registry container to one plan, with its outcome."""
    __tablename__ = "plan_containers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    plan_id = Column(
        UUID(as_uuid=True),
        ForeignKey("receive_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_container_id = Column(
        UUID(as_uuid=True),
        ForeignKey("order_containers.id"),
        nullable=False,
        index=True,
    )
    sequence = Column(Integer, nullable=False, default=1)

    assigned_at = Column(DateTime, nullable=False, default=utc_now)
    unassigned_at = Column(DateTime, nullable=True)

    status = Column(
        Enum(PlanContainerStatus, native_enum=False),
        nullable=False,
        default=PlanContainerStatus.WAITING,
    )
    received_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    truck_no = Column(String(40), nullable=True)
    received_type = Column(
        Enum(ReceivedType, native_enum=False),
        nullable=False,
        default=ReceivedType.NORMAL,
    )
    notes = Column(Text, nullable=True)

    plan = relationship("ReceivePlan", back_populates="containers")
    order_container = relationship("OrderContainer", lazy="joined")

    @property
    def status_value(self) -> str:
        return cast(PlanContainerStatus, self.status).value

    @property
    def completed(self) -> bool:
        return cast(PlanContainerStatus, self.status) in TERMINAL_CONTAINER_STATUSES

    def mark_received(
        self,
        at_time: datetime,
        truck_no: Optional[str] = None,
        received_type: ReceivedType = ReceivedType.NORMAL,
        notes: Optional[str] = None,
    ) -> None:
        self.status = PlanContainerStatus.RECEIVED
        self.received_at = at_time
        self.truck_no = truck_no
        self.received_type = received_type
        self.notes = notes

    def mark_rejected(self, at_time: datetime, notes: Optional[str] = None) -> None:
        self.status = PlanContainerStatus.REJECTED
        self.rejected_at = at_time
        self.notes = notes
