import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from doccure.booking.errors import BookingError
from doccure.booking.models import BookingStatus
from doccure.booking.principal import Principal
from doccure.dependencies import Services, get_principal, get_services

router = APIRouter(tags=["appointments"])
logger = logging.getLogger("doccure-server")


async def _list_own(principal: Principal, services: Services, status: BookingStatus) -> list:
    try:
        bookings = await services.lifecycle.list_for_principal(principal.email, status)
        return [b.to_document() for b in bookings]
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing {status.value} appointments for {principal.email}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list appointments")


@router.get("/user-appointments")
async def user_appointments(
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """The caller's upcoming (pending) appointments."""
    return await _list_own(principal, services, BookingStatus.PENDING)


@router.get("/user-appointments/result")
async def user_results(
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """The caller's delivered appointments, results attached."""
    return await _list_own(principal, services, BookingStatus.DELIVERED)


@router.get("/all-appointments")
async def all_appointments(
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    if not services.gate.can_list_all(principal):
        raise HTTPException(status_code=403, detail="forbidden access")
    try:
        return [b.to_document() for b in await services.lifecycle.list_all()]
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing all appointments: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list appointments")


@router.get("/appointment/search")
async def search_appointments(
    searchQuery: str = Query(default=""),
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """Find bookings whose email contains the query (case-insensitive, literal)."""
    if not services.gate.can_search(principal):
        raise HTTPException(status_code=403, detail="forbidden access")
    try:
        return [b.to_document() for b in await services.lifecycle.search(searchQuery)]
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error searching appointments for {searchQuery!r}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to search appointments")
