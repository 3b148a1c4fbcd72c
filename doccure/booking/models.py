"""
Booking models — documents the booking core reads and writes.

Documents are stored with the camelCase keys the clinic frontend already
speaks (``availableDate``, ``couponCode``, ``isActive`` ...) and an ``_id``
primary key.  Models accept either the alias or the Python field name.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class BookingStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TestOffering(_Document):
    """A batch of bookable slots for one lab test."""

    # Keep pytest from collecting this class.
    __test__ = False

    name: str = ""
    slots: int = Field(default=0, ge=0)
    total_slots: Optional[int] = Field(default=None, ge=0)
    price: float = 0.0
    available_date: str = ""

    @model_validator(mode="after")
    def _default_total(self) -> "TestOffering":
        if self.total_slots is None:
            self.total_slots = self.slots
        if self.slots > self.total_slots:
            raise ValueError("slots cannot exceed totalSlots")
        return self


class Booking(_Document):
    """A reservation of one slot on a test offering."""

    test_id: str
    email: str
    status: BookingStatus = BookingStatus.PENDING
    result: Optional[dict[str, Any]] = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)
    delivered_at: Optional[datetime] = None


class Coupon(BaseModel):
    """Coupon embedded in a promotional banner document."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(alias="couponCode")
    is_active: bool = Field(default=False, alias="isActive")
    rate: Optional[float] = Field(default=None, alias="couponRate")


@dataclass
class DiscountQuote:
    """Outcome of a coupon check."""

    valid: bool
    discount: Optional[float] = None


@dataclass
class PaymentIntentResult:
    """What the gateway handed back for a new payment intent."""

    client_secret: str
    amount: int
    currency: str
    intent_id: str = ""


class BookingRequest(BaseModel):
    """What a client asks for when booking a test."""

    test_id: str
    email: str
    details: dict[str, Any] = Field(default_factory=dict)
