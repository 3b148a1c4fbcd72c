"""
Doccure Booking Service — Application Factory
"""

import time
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from doccure import settings

# ── 1. Configure logging ──
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("doccure-server")

_startup_time = time.time()

# ── 2. Create FastAPI app ──
app = FastAPI(title="Doccure Booking Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── 3. Register routers ──
from doccure.routers import (
    health,
    catalog,
    booking,
    appointments,
    payments,
)

app.include_router(health.router)
app.include_router(catalog.router)
app.include_router(booking.router)
app.include_router(appointments.router)
app.include_router(payments.router)


# ── 4. Startup / shutdown ──
@app.on_event("startup")
async def startup_event():
    """Connect storage and wire the booking services before serving requests."""
    from doccure.dependencies import initialize_services
    await initialize_services()
    logger.info("=" * 60)
    logger.info("Doccure Booking Service Starting")
    logger.info(f"Listening on port: {settings.PORT}")
    logger.info(f"Total init time: {time.time() - _startup_time:.2f}s")
    logger.info("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    from doccure.dependencies import shutdown_services
    await shutdown_services()
