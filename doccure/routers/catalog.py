import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from doccure.booking.errors import BookingError
from doccure.booking.principal import Principal
from doccure.dependencies import Services, get_principal, get_services
from doccure.schemas.booking import CreateTestRequest

router = APIRouter(tags=["catalog"])
logger = logging.getLogger("doccure-server")


@router.post("/tests")
async def add_test(
    request: CreateTestRequest,
    principal: Principal = Depends(get_principal),
    services: Services = Depends(get_services),
):
    """Add a bookable test offering (admin only)."""
    if not services.gate.can_manage_catalog(principal):
        raise HTTPException(status_code=403, detail="forbidden access")
    try:
        fields = {**(request.model_extra or {}), **request.model_dump(by_alias=True, exclude_none=True)}
        return await services.catalog.add(fields)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding test: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to add test")


@router.get("/tests")
async def list_tests(services: Services = Depends(get_services)):
    """Tests that are available today or later."""
    try:
        return await services.catalog.upcoming()
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing tests: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list tests")
