from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.receive_plan import PlanContainerStatus, PlanStatus, ReceivedType
from schemas.order_container import OrderContainerResponse


class PlanCreate(BaseModel):
    planned_start: datetime
    planned_end: datetime
    equipment_booked: bool = False
    port_notified: bool = False
    container_ids: List[UUID] = Field(default_factory=list)


class PlanHeaderUpdate(BaseModel):
    planned_start: Optional[datetime] = None
    planned_end: Optional[datetime] = None
    equipment_booked: Optional[bool] = None
    port_notified: Optional[bool] = None


class PlanStatusChange(BaseModel):
    status: PlanStatus


class ContainerAssignmentRequest(BaseModel):
    order_container_id: UUID


class ReceiveContainerRequest(BaseModel):
    truck_no: Optional[str] = Field(default=None, max_length=40)
    received_type: ReceivedType = ReceivedType.NORMAL
    notes: Optional[str] = Field(default=None, max_length=5000)


class RejectContainerRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=5000)


class PlanContainerResponse(BaseModel):
    id: UUID
    plan_id: UUID
    order_container_id: UUID
    assigned_at: datetime
    unassigned_at: Optional[datetime] = None
    status: PlanContainerStatus
    received_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    truck_no: Optional[str] = None
    received_type: ReceivedType
    notes: Optional[str] = None
    completed: bool
    order_container: Optional[OrderContainerResponse] = None

    model_config = ConfigDict(from_attributes=True)


class PlanResponse(BaseModel):
    id: UUID
    code: str
    status: PlanStatus
    planned_start: datetime
    planned_end: datetime
    execution_start: Optional[datetime] = None
    execution_end: Optional[datetime] = None
    pending_date: Optional[datetime] = None
    equipment_booked: bool
    port_notified: bool
    containers: List[PlanContainerResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlanSaveResponse(BaseModel):
    plan: PlanResponse
    warnings: List[str] = Field(default_factory=list)


class ExecutionSummaryResponse(BaseModel):
    plan_id: UUID
    total: int
    received: int
    rejected: int
    waiting: int
    problem: int
    adjusted: int
    expected_end: datetime
    can_mark_done: bool
    can_mark_pending: bool
    refresh_interval_minutes: int
