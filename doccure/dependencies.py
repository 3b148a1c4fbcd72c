"""
Process-wide services, built once at startup and handed to routers
through FastAPI dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from doccure import settings
from doccure.booking.catalog import TestCatalog
from doccure.booking.discounts import DiscountEngine
from doccure.booking.errors import BookingError
from doccure.booking.lifecycle import BookingLifecycle
from doccure.booking.payments import PaymentCoordinator
from doccure.booking.permissions import AuthorizationGate
from doccure.booking.principal import Principal, PrincipalResolver
from doccure.booking.slot_ledger import SlotLedger
from doccure.booking.store import DocumentStore
from doccure.infrastructure.gcs import GCSBucketManager

logger = logging.getLogger("doccure-server")


@dataclass
class Services:
    store: DocumentStore
    ledger: SlotLedger
    discounts: DiscountEngine
    payments: PaymentCoordinator
    gate: AuthorizationGate
    lifecycle: BookingLifecycle
    principals: PrincipalResolver
    catalog: TestCatalog


# Module-level singletons (set during initialize_services)
_services: Services | None = None
gcs = None


def get_gcs():
    """Lazy creation of the GCS bucket manager"""
    global gcs
    if gcs is None:
        logger.info("Creating GCS bucket manager for %s...", settings.GCS_BUCKET_NAME)
        gcs = GCSBucketManager(
            bucket_name=settings.GCS_BUCKET_NAME,
            service_account_json_path=settings.GCS_SERVICE_ACCOUNT_JSON,
        )
    return gcs


def build_services(
    store: DocumentStore,
    *,
    stripe_secret_key: str | None = None,
    currency: str | None = None,
    token_secret: str | None = None,
    release_on_cancel: bool | None = None,
) -> Services:
    """Wire the booking core around an already-created store."""
    ledger = SlotLedger(store)
    gate = AuthorizationGate()
    return Services(
        store=store,
        ledger=ledger,
        discounts=DiscountEngine(store),
        payments=PaymentCoordinator(
            stripe_secret_key if stripe_secret_key is not None else settings.STRIPE_SECRET_KEY,
            currency=currency or settings.PAYMENT_CURRENCY,
        ),
        gate=gate,
        lifecycle=BookingLifecycle(
            store,
            ledger,
            gate,
            release_on_cancel=(
                settings.RELEASE_SLOT_ON_CANCEL
                if release_on_cancel is None else release_on_cancel
            ),
        ),
        principals=PrincipalResolver(
            store,
            token_secret if token_secret is not None else settings.ACCESS_TOKEN_SECRET,
        ),
        catalog=TestCatalog(store),
    )


async def initialize_services() -> Services:
    """Connect the store, load seed data, and wire the booking core."""
    global _services

    logger.info("Initializing booking services...")
    store = DocumentStore(get_gcs(), database_name=settings.DATABASE_NAME)
    await store.connect()

    if settings.SEED_FILE:
        count = await store.seed_from_file(settings.SEED_FILE)
        logger.info("Loaded %d seed documents from %s", count, settings.SEED_FILE)

    if not settings.ACCESS_TOKEN_SECRET:
        logger.warning("ACCESS_TOKEN_SECRET is not set - every authenticated request will fail")

    _services = build_services(store)
    logger.info(
        "Booking services ready (release_on_cancel=%s, payments=%s)",
        _services.lifecycle.release_on_cancel,
        "on" if _services.payments.configured else "off",
    )
    return _services


async def shutdown_services() -> None:
    """Gracefully close the store."""
    global _services
    if _services:
        await _services.store.close()
        _services = None
        logger.info("Booking services shut down")


def set_services(services: Services | None) -> None:
    global _services
    _services = services


def services_ready() -> bool:
    return _services is not None and _services.store.connected


def get_services() -> Services:
    if _services is None:
        raise HTTPException(status_code=503, detail="Booking services not initialized")
    return _services


# ── Per-request dependencies ──


def _extract_token(request: Request) -> str | None:
    token = request.cookies.get(settings.TOKEN_COOKIE_NAME)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return None


async def get_principal(
    request: Request, services: Services = Depends(get_services)
) -> Principal:
    try:
        return await services.principals.resolve(_extract_token(request))
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

