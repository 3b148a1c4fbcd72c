import logging

from fastapi import APIRouter, Depends, HTTPException

from doccure.booking.errors import BookingError
from doccure.dependencies import Services, get_services
from doccure.schemas.payment import CouponRequest, PaymentIntentRequest, PaymentIntentResponse

router = APIRouter(tags=["payments"])
logger = logging.getLogger("doccure-server")


@router.post("/coupon")
async def check_coupon(request: CouponRequest, services: Services = Depends(get_services)):
    """Quote the discount a coupon gives on a price."""
    try:
        quote = await services.discounts.quote(request.coupon, request.price)
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error checking coupon: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to check coupon")

    if quote.valid:
        return {"coupon": "valid", "discount": quote.discount}
    return {"coupon": "invalid"}


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest, services: Services = Depends(get_services)
):
    """Create a card payment intent and return its client secret."""
    try:
        intent = await services.payments.create_intent(request.price)
        return {"clientSecret": intent.client_secret}
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating payment intent: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create payment intent")
