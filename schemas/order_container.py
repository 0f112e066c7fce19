import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.order_container import CargoReleaseStatus, CustomsStatus


class OrderContainerBase(BaseModel):
    container_no: str = Field(
        ...,
        min_length=11,
        max_length=11,
        description="Container number in ISO 6346 format (4 letters + 7 digits, e.g., MSCU1234567)",
    )
    type_code: Optional[str] = None
    order_code: Optional[str] = None
    vessel_code: Optional[str] = None
    voyage: Optional[str] = None
    eta: Optional[datetime] = None
    extract_to: Optional[datetime] = None
    yard_free_to: Optional[datetime] = None
    is_priority: bool = False
    at_yard: bool = False
    customs_status: CustomsStatus = CustomsStatus.NOT_REGISTERED
    cargo_release_status: CargoReleaseStatus = CargoReleaseStatus.NOT_REQUESTED

    model_config = ConfigDict(from_attributes=True)

    @field_validator("container_no", mode="before")
    @classmethod
    def validate_container_no(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("Container number must be a string")

        v = v.upper().strip()
        if not re.match(r"^[A-Z]{4}[0-9]{7}$", v):
            raise ValueError(
                f"Invalid format: '{v}'. Expected 4 uppercase letters + 7 digits (e.g., MSCU1234567)."
            )
        return v


class OrderContainerResponse(OrderContainerBase):
    id: UUID


class UnplannedContainerResponse(OrderContainerResponse):
    priority_score: int
