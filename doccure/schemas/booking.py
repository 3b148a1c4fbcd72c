from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

from doccure.booking.models import BookingRequest


class TestRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)


class BookingTestRequest(BaseModel):
    """Body of POST /booking-test.  Extra fields are kept on the booking."""

    model_config = ConfigDict(extra="allow")

    test: TestRef
    email: str = Field(min_length=3)

    def to_booking_request(self) -> BookingRequest:
        details: dict[str, Any] = dict(self.model_extra or {})
        details.pop("status", None)
        details.pop("_id", None)
        details["test"] = self.test.model_dump()
        return BookingRequest(test_id=self.test.id, email=self.email, details=details)


class ResultAcknowledgement(BaseModel):
    acknowledged: bool
    booking: dict


class CreateTestRequest(BaseModel):
    """Body of POST /tests."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    slots: int = Field(ge=0)
    total_slots: Optional[int] = Field(default=None, ge=0, alias="totalSlots")
    price: float = Field(ge=0)
    available_date: str = Field(alias="availableDate")
