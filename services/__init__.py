"""
Services module - receive planning engine for the CFS receive planning service.
"""
from services.assignment_manager import AssignmentManager
from services.container_registry import ContainerRegistry
from services.plan_lifecycle import PlanLifecycle
from services.plan_store import PlanStore
from services.receive_plan_service import ReceivePlanService

__all__ = [
    "AssignmentManager",
    "ContainerRegistry",
    "PlanLifecycle",
    "PlanStore",
    "ReceivePlanService",
]
