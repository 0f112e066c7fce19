"""
Read-only access to the Container Registry and the unplanned projection.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Optional, Set, cast
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import ContainerNotFoundError
from core.timeutils import utc_now
from models.order_container import CargoReleaseStatus, CustomsStatus, OrderContainer

CARGO_RELEASE_SCORES = {
    CargoReleaseStatus.APPROVED: 1000,
    CargoReleaseStatus.REQUESTED: 500,
}

CUSTOMS_SCORES = {
    CustomsStatus.HAS_CCP: 800,
    CustomsStatus.PENDING_APPROVAL: 400,
    CustomsStatus.REGISTERED: 200,
}

EXTRACTION_HORIZON_DAYS = 100
FREE_STORAGE_HORIZON_DAYS = 50
PRIORITY_FLAG_SCORE = 300
AT_YARD_SCORE = 100


def days_until(deadline: Optional[datetime], today: date) -> Optional[int]:
    if deadline is None:
        return None
    return (deadline.date() - today).days


class ContainerRegistry:
    """Container lookups used for validation and display."""

    @staticmethod
    def get_many(order_container_ids: Iterable[UUID], db: Session) -> List[OrderContainer]:
        """Fetch containers in the requested order; unknown ids raise."""
        ids = list(order_container_ids)
        found = {
            container.id: container
            for container in db.query(OrderContainer).filter(OrderContainer.id.in_(ids)).all()
        }
        missing = [item for item in ids if item not in found]
        if missing:
            raise ContainerNotFoundError(missing)
        return [found[item] for item in ids]

    @staticmethod
    def calculate_priority(container: OrderContainer, today: Optional[date] = None) -> int:
        """Urgency score of an unplanned container; higher is more urgent."""
        today = today or utc_now().date()
        score = 0
        score += CARGO_RELEASE_SCORES.get(cast(CargoReleaseStatus, container.cargo_release_status), 0)
        score += CUSTOMS_SCORES.get(cast(CustomsStatus, container.customs_status), 0)

        days_to_extraction = days_until(cast(Optional[datetime], container.extract_to), today)
        if days_to_extraction is not None:
            score += max(EXTRACTION_HORIZON_DAYS - min(days_to_extraction, EXTRACTION_HORIZON_DAYS), 0)

        days_to_free_storage = days_until(cast(Optional[datetime], container.yard_free_to), today)
        if days_to_free_storage is not None:
            score += max(FREE_STORAGE_HORIZON_DAYS - min(days_to_free_storage, FREE_STORAGE_HORIZON_DAYS), 0)

        if container.is_priority:
            score += PRIORITY_FLAG_SCORE
        if container.at_yard:
            score += AT_YARD_SCORE
        return score

    @staticmethod
    def sort_by_priority(
        containers: Iterable[OrderContainer], today: Optional[date] = None
    ) -> List[OrderContainer]:
        today = today or utc_now().date()
        # sorted() is stable, so equal scores keep registry order.
        return sorted(
            containers,
            key=lambda item: ContainerRegistry.calculate_priority(item, today),
            reverse=True,
        )

    @staticmethod
    def list_unplanned(planned_ids: Set[UUID], db: Session) -> List[OrderContainer]:
        containers = db.query(OrderContainer).order_by(OrderContainer.created_at.asc()).all()
        return ContainerRegistry.sort_by_priority(
            item for item in containers if item.id not in planned_ids
        )
