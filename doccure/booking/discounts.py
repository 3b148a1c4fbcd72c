"""
Discount Engine — prices a coupon against the active promotional banners.

An unknown or inactive coupon is a normal answer ("invalid"), not an error.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from doccure.booking.models import Coupon, DiscountQuote
from doccure.booking.store import DocumentStore

logger = logging.getLogger("doccure.discounts")

BANNER_COLLECTION = "banner"


class DiscountEngine:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def find_active_coupon(self, code: str) -> Coupon | None:
        """Exact, case-sensitive match among active banners."""
        docs = await self._store.find(
            BANNER_COLLECTION, lambda d: d.get("couponCode") == code
        )
        for doc in docs:
            try:
                coupon = Coupon.model_validate(doc)
            except ValidationError as exc:
                logger.warning("Skipping malformed banner %s: %s", doc.get("_id"), exc)
                continue
            if coupon.is_active:
                return coupon
        return None

    async def quote(self, code: str, price: float) -> DiscountQuote:
        coupon = await self.find_active_coupon(code)
        if coupon is None or not coupon.rate:
            logger.info("Coupon %r rejected", code)
            return DiscountQuote(valid=False)

        discount = float(price) * coupon.rate / 100
        logger.info("Coupon %r accepted: %.2f off %.2f", code, discount, float(price))
        return DiscountQuote(valid=True, discount=discount)
