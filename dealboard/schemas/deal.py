"""Deal and customer schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from ..errors import UnknownStageError


class DealStage(str, Enum):
    OPEN = "OPEN"
    PENDING = "PENDING"
    WON = "WON"
    LOST = "LOST"

    @classmethod
    def parse(cls, value: Any) -> DealStage:
        """Accept a stage in any letter case; anything else is unrecognized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise UnknownStageError(value)


ACTIVE_STAGES = (DealStage.OPEN, DealStage.PENDING)
CLOSED_STAGES = (DealStage.WON, DealStage.LOST)


def _stage_field(value: Any) -> DealStage:
    try:
        return DealStage.parse(value)
    except UnknownStageError as exc:
        raise ValueError(exc.message) from exc


StageField = Annotated[DealStage, BeforeValidator(_stage_field)]


class Deal(BaseModel):
    id: str
    title: str = ""
    value: float = Field(default=0.0, ge=0)
    status: StageField = DealStage.OPEN
    user_id: str = ""
    customer_id: str | None = None
    # Display cache only; refreshed from the customer collection on load
    customer_name: str | None = None
    closing_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}

    @property
    def customer_label(self) -> str:
        if self.customer_name:
            return self.customer_name
        if self.customer_id:
            return f"Customer {self.customer_id[:8]}"
        return "Unknown customer"


class DealCreate(BaseModel):
    title: str = ""
    value: float = Field(default=0.0, ge=0)
    status: StageField = DealStage.OPEN
    customer_id: str | None = None
    customer_name: str | None = None
    closing_date: datetime | None = None


class DealUpdate(BaseModel):
    """Partial edit; omitted fields are left alone.

    ``title`` and ``value`` may be omitted but never cleared.
    """

    title: str | None = None
    value: float | None = Field(default=None, ge=0)
    customer_id: str | None = None
    customer_name: str | None = None
    closing_date: datetime | None = None

    @field_validator("title", "value", mode="before")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may not be null")
        return v


class MoveRequest(BaseModel):
    status: str


class DropRequest(BaseModel):
    zone: str


class StageSummary(BaseModel):
    count: int = 0
    value: float = 0.0


class CustomerStatus(str, Enum):
    LEAD = "LEAD"
    PROSPECT = "PROSPECT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Customer(BaseModel):
    id: str
    name: str = ""
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    status: CustomerStatus = CustomerStatus.LEAD
    user_id: str = ""

    model_config = {"extra": "ignore"}


class CustomerCreate(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    status: CustomerStatus = CustomerStatus.LEAD

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v


class CustomerUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    status: CustomerStatus | None = None

    @field_validator("name", "status", mode="before")
    @classmethod
    def _not_blank(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("may not be empty")
        return v.strip() if isinstance(v, str) else v
