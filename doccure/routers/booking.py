import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from doccure.booking.errors import BookingError
from doccure.booking.principal import Principal
from doccure.dependencies import Services, get_principal, get_services
from doccure.schemas.booking import BookingTestRequest, ResultAcknowledgement

router = APIRouter(tags=["booking"])
logger = logging.getLogger("doccure-server")


@router.post("/booking-test")
async def book_test(
    request: BookingTestRequest,
    services: Services = Depends(get_services),
):
    """Reserve a slot on a test and record a pending booking."""
    try:
        booking = await services.lifecycle.create(request.to_booking_request())
        return booking.to_document()
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error booking test {request.test.id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to book test")


@router.put("/add-result/{booking_id}", response_model=ResultAcknowledgement)
async def add_result(
    booking_id: str,
    result: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """Attach a test result and mark the booking delivered (admin only)."""
    if not services.gate.can_fulfill(principal):
        raise HTTPException(status_code=403, detail="forbidden access")
    try:
        booking = await services.lifecycle.fulfill(booking_id, result)
        return {"acknowledged": True, "booking": booking.to_document()}
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding result to booking {booking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to add result")


@router.delete("/delete-appointment/admin/{booking_id}")
async def delete_appointment_admin(
    booking_id: str,
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """Delete any booking (admin only)."""
    if not services.gate.can_delete_any(principal):
        raise HTTPException(status_code=403, detail="forbidden access")
    return await _cancel(booking_id, principal, services)


@router.delete("/delete-appointment/{booking_id}")
async def delete_appointment(
    booking_id: str,
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """Delete one of the caller's own bookings."""
    return await _cancel(booking_id, principal, services)


async def _cancel(booking_id: str, principal: Principal, services: Services) -> dict:
    try:
        booking = await services.lifecycle.cancel(booking_id, principal)
        return {"deletedCount": 1, "booking": booking.to_document()}
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting booking {booking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete appointment")
