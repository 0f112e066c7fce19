"""
Container Registry record: a container announced on a booking order.
"""
from __future__ import annotations

# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import uuid
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, Enum, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base
from core.timeutils import utc_now


class CustomsStatus(PyEnum):
    NOT_REGISTERED = "NOT_REGISTERED"
    REGISTERED = "REGISTERED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    HAS_CCP = "HAS_CCP"
    REJECTED = "REJECTED"


class CargoReleaseStatus(PyEnum):
    NOT_REQUESTED = "NOT_REQUESTED"
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"


class OrderContainer(Base):
    """
    Container known to the registry. The planning engine reads identity and
    deadline fields only; nothing here is mutated by plan operations.
    """
    __tablename__ = "order_containers"

    __table_args__ = (
        UniqueConstraint("container_no", name="uq_order_container_no"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    container_no = Column(String(11), nullable=False, doc="ISO 6346 container number")
    type_code = Column(String(8), nullable=True, doc="Size/type code, e.g. 40HC or 20GP")
    seal_no = Column(String(50), nullable=True)

    # Booking order metadata
    order_code = Column(String(40), nullable=True)
    vessel_code = Column(String(40), nullable=True)
    voyage = Column(String(40), nullable=True)
    eta = Column(DateTime, nullable=True)

    # Deadlines
    extract_to = Column(DateTime, nullable=True, doc="Latest extraction date from the port")
    yard_free_to = Column(DateTime, nullable=True, doc="End of free storage at the port yard")

    is_priority = Column(Boolean, nullable=False, default=False)
    at_yard = Column(Boolean, nullable=False, default=False)
    customs_status = Column(
        Enum(CustomsStatus, native_enum=False),
        nullable=False,
        default=CustomsStatus.NOT_REGISTERED,
    )
    cargo_release_status = Column(
        Enum(CargoReleaseStatus, native_enum=False),
        nullable=False,
        default=CargoReleaseStatus.NOT_REQUESTED,
    )

    created_at = Column(DateTime, nullable=False, default=utc_now)
