"""
Payment Coordinator — mints Stripe payment intents for a booking's price.

Prices arrive in major units (dollars) and are truncated, not rounded, to
minor units.  Intent creation is not safe to repeat blindly, so gateway
failures are surfaced as GatewayError and never retried here.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation

import stripe

from doccure.booking.errors import BookingValidationError, GatewayError
from doccure.booking.models import PaymentIntentResult

logger = logging.getLogger("doccure.payments")

PAYMENT_METHOD_TYPES = ["card"]


def to_minor_units(price: float | str | Decimal) -> int:
    """
    Convert a major-unit price to integer minor units, truncating toward zero.

    Works on the decimal text of the price: 19.99 -> 1999, 19.999 -> 1999.
    """
    try:
        amount = Decimal(str(price)) * 100
    except InvalidOperation:
        raise BookingValidationError(f"Invalid price: {price!r}") from None
    if not amount.is_finite():
        raise BookingValidationError(f"Invalid price: {price!r}")
    return int(amount.to_integral_value(rounding=ROUND_DOWN))


class PaymentCoordinator:
    def __init__(self, api_key: str | None, currency: str = "usd") -> None:
        self._api_key = api_key
        self.currency = currency
        # Repeated create calls can mint several intents.
        stripe.max_network_retries = 0
        if not api_key:
            logger.warning("Stripe secret key not configured - payment intents are disabled")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def create_intent(self, price: float | str | Decimal) -> PaymentIntentResult:
        amount = to_minor_units(price)
        if amount < 0:
            raise BookingValidationError("Price must not be negative")
        if not self._api_key:
            raise GatewayError("Payment gateway is not configured")

        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=self.currency,
                payment_method_types=PAYMENT_METHOD_TYPES,
                api_key=self._api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe rejected payment intent for %d %s: %s", amount, self.currency, exc)
            raise GatewayError(f"Payment gateway error: {exc.user_message or exc}") from exc

        logger.info("Created payment intent %s for %d %s", intent.id, amount, self.currency)
        return PaymentIntentResult(
            client_secret=intent.client_secret,
            amount=amount,
            currency=self.currency,
            intent_id=intent.id,
        )
