from fastapi import APIRouter

from doccure import settings
from doccure.dependencies import services_ready

router = APIRouter()


@router.get("/")
async def root():
    return {
        "status": "Server is running",
        "endpoints": {
            "tests": "/tests",
            "booking": "/booking-test",
            "appointments": "/user-appointments",
            "results": "/user-appointments/result",
            "coupon": "/coupon",
            "payment_intent": "/create-payment-intent",
        },
    }


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "doccure-booking",
        "database": "connected" if services_ready() else "unavailable",
        "port": settings.PORT,
    }
