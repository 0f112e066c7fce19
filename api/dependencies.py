from services.receive_plan_service import ReceivePlanService

# One engine per process: the lock registry and pending-removal buffer must be
# shared by every request that touches the same plan.
plan_service = ReceivePlanService()


def get_plan_service() -> ReceivePlanService:
    return plan_service
