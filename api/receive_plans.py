from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_plan_service
from core.database import get_db
from models.receive_plan import PlanContainerStatus, PlanStatus
from schemas.order_container import OrderContainerResponse, UnplannedContainerResponse
from schemas.receive_plan import (
    ContainerAssignmentRequest,
    ExecutionSummaryResponse,
    PlanContainerResponse,
    PlanCreate,
    PlanHeaderUpdate,
    PlanResponse,
    PlanSaveResponse,
    PlanStatusChange,
    ReceiveContainerRequest,
    RejectContainerRequest,
)
from services.config_service import get_plan_refresh_interval_minutes
from services.container_registry import ContainerRegistry
from services.execution_summary import reorder_pending_plan_containers
from services.receive_plan_service import ReceivePlanService

router = APIRouter(prefix="/receive-plans", tags=["receive-planning"])
unplanned_router = APIRouter(prefix="/unplanned-containers", tags=["receive-planning"])


@router.get("/", response_model=List[PlanResponse])
def list_plans(
    status: Optional[PlanStatus] = Query(default=None),
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    return service.list_plans(db, status)


@router.post("/", response_model=PlanSaveResponse, status_code=201)
def create_plan(
    payload: PlanCreate,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    plan = service.create_plan(
        payload.planned_start,
        payload.planned_end,
        payload.container_ids,
        db,
        equipment_booked=payload.equipment_booked,
        port_notified=payload.port_notified,
    )
    return {"plan": plan, "warnings": service.plan_warnings(plan)}


@router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(
    plan_id: UUID,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    plan = service.get_plan(plan_id, db)
    response = PlanResponse.model_validate(plan)
    if plan.status == PlanStatus.PENDING:
        # Rejected containers are what a pending plan is waiting on.
        response.containers = reorder_pending_plan_containers(response.containers)
    return response


@router.patch("/{plan_id}", response_model=PlanSaveResponse)
def update_plan_header(
    plan_id: UUID,
    payload: PlanHeaderUpdate,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    plan = service.update_plan_header(
        plan_id,
        db,
        planned_start=payload.planned_start,
        planned_end=payload.planned_end,
        equipment_booked=payload.equipment_booked,
        port_notified=payload.port_notified,
    )
    return {"plan": plan, "warnings": service.plan_warnings(plan)}


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: UUID,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    service.delete_plan(plan_id, db)
    return {"deleted": True, "plan_id": str(plan_id)}


@router.post("/{plan_id}/status", response_model=PlanResponse)
def change_plan_status(
    plan_id: UUID,
    payload: PlanStatusChange,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    return service.transition_plan(plan_id, payload.status, db)


@router.get("/{plan_id}/execution-summary", response_model=ExecutionSummaryResponse)
def get_execution_summary(
    plan_id: UUID,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    report = service.get_execution_summary(plan_id, db)
    summary = report.summary
    return ExecutionSummaryResponse(
        plan_id=plan_id,
        total=summary.total,
        received=summary.received,
        rejected=summary.rejected,
        waiting=summary.waiting,
        problem=summary.problem,
        adjusted=summary.adjusted,
        expected_end=report.expected_end,
        can_mark_done=report.can_mark_done,
        can_mark_pending=report.can_mark_pending,
        refresh_interval_minutes=get_plan_refresh_interval_minutes(),
    )


# ==================== CONTAINER ASSIGNMENTS ====================

@router.post("/{plan_id}/container-assignments", response_model=PlanContainerResponse, status_code=201)
def assign_container(
    plan_id: UUID,
    payload: ContainerAssignmentRequest,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    return service.assign_container(plan_id, payload.order_container_id, db)


@router.delete("/{plan_id}/container-assignments/{assignment_id}")
def unassign_container(
    plan_id: UUID,
    assignment_id: UUID,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    service.unassign_container(plan_id, assignment_id, db)
    return {"unassigned": True, "assignment_id": str(assignment_id)}


@router.patch("/assignments/{assignment_id}/receive", response_model=PlanContainerResponse)
def receive_container(
    assignment_id: UUID,
    payload: ReceiveContainerRequest,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    return service.record_container_outcome(
        assignment_id,
        PlanContainerStatus.RECEIVED,
        db,
        truck_no=payload.truck_no,
        received_type=payload.received_type,
        notes=payload.notes,
    )


@router.patch("/assignments/{assignment_id}/reject", response_model=PlanContainerResponse)
def reject_container(
    assignment_id: UUID,
    payload: RejectContainerRequest,
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    return service.record_container_outcome(
        assignment_id,
        PlanContainerStatus.REJECTED,
        db,
        notes=payload.notes,
    )


# ==================== UNPLANNED CONTAINERS ====================

@unplanned_router.get("/", response_model=List[UnplannedContainerResponse])
def list_unplanned_containers(
    db: Session = Depends(get_db),
    service: ReceivePlanService = Depends(get_plan_service),
):
    containers = service.list_unplanned_containers(db)
    return [
        UnplannedContainerResponse(
            **OrderContainerResponse.model_validate(container).model_dump(),
            priority_score=ContainerRegistry.calculate_priority(container),
        )
        for container in containers
    ]
