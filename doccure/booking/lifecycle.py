"""
Booking Lifecycle — creates, fulfils and cancels bookings.

State machine:  pending ──fulfill──▶ delivered
Cancellation removes the record; it is not a state.

A booking only exists if a slot was reserved for it.  ``create`` reserves
first and, if the booking cannot be written, hands the slot back before
re-raising.
"""

from __future__ import annotations

import logging
from typing import Any

from doccure.booking.errors import BookingError, ForbiddenError, NotFoundError
from doccure.booking.models import Booking, BookingRequest, BookingStatus, _now
from doccure.booking.permissions import AuthorizationGate
from doccure.booking.principal import Principal
from doccure.booking.slot_ledger import SlotLedger
from doccure.booking.store import DocumentStore

logger = logging.getLogger("doccure.lifecycle")

BOOKING_COLLECTION = "booking"

# Result payload keys that would let a client rewrite booking identity or state
_PROTECTED_RESULT_KEYS = {"id", "_id", "status"}


class BookingLifecycle:
    def __init__(
        self,
        store: DocumentStore,
        ledger: SlotLedger,
        gate: AuthorizationGate,
        release_on_cancel: bool = True,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._gate = gate
        self.release_on_cancel = release_on_cancel

    # ── Mutations ──

    async def create(self, request: BookingRequest) -> Booking:
        await self._ledger.reserve(request.test_id)

        booking = Booking(
            test_id=request.test_id,
            email=request.email,
            details=request.details,
        )
        try:
            await self._store.insert_one(BOOKING_COLLECTION, booking.to_document())
        except Exception:
            logger.error(
                "Booking insert failed for test %s; releasing reserved slot",
                request.test_id,
                exc_info=True,
            )
            try:
                await self._ledger.release(request.test_id)
            except Exception as release_exc:
                logger.error(
                    "Compensating release failed for test %s: %s",
                    request.test_id, release_exc,
                )
            raise

        logger.info(
            "Created booking %s for %s on test %s",
            booking.id, booking.email, booking.test_id,
        )
        return booking

    async def fulfill(self, booking_id: str, result: dict[str, Any]) -> Booking:
        """Attach a result and mark delivered.  Re-fulfilling overwrites the result."""
        payload = {k: v for k, v in result.items() if k not in _PROTECTED_RESULT_KEYS}

        current = await self.get(booking_id)
        fields: dict[str, Any] = {
            "result": payload,
            "status": BookingStatus.DELIVERED.value,
        }
        if current.delivered_at is None:
            fields["deliveredAt"] = _now().isoformat()

        doc = await self._store.update_one(BOOKING_COLLECTION, booking_id, fields)
        if doc is None:
            raise NotFoundError(f"Booking {booking_id} not found")

        logger.info("Booking %s delivered", booking_id)
        return Booking.model_validate(doc)

    async def cancel(self, booking_id: str, principal: Principal) -> Booking:
        booking = await self.get(booking_id)

        if not self._gate.can_delete(principal, booking):
            raise ForbiddenError("forbidden access")

        removed = await self._store.delete_one(BOOKING_COLLECTION, booking_id)
        if removed is None:
            # Lost a race with another cancel of the same booking.
            raise NotFoundError(f"Booking {booking_id} not found")

        # The record as it was deleted; a fulfil may have landed since the read above.
        booking = Booking.model_validate(removed)
        logger.info(
            "Booking %s (%s) cancelled by %s",
            booking_id, booking.status.value, principal.email,
        )

        if self.release_on_cancel and booking.status == BookingStatus.PENDING:
            try:
                await self._ledger.release(booking.test_id)
            except BookingError as e:
                logger.warning(
                    "Slot for booking %s not returned to test %s: %s",
                    booking_id, booking.test_id, e,
                )
        return booking

    # ── Reads ──

    async def get(self, booking_id: str) -> Booking:
        doc = await self._store.find_one(BOOKING_COLLECTION, booking_id)
        if doc is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return Booking.model_validate(doc)

    async def list_for_principal(
        self, email: str, status: BookingStatus
    ) -> list[Booking]:
        return await self._query(
            lambda d: d.get("email") == email and d.get("status") == status.value
        )

    async def list_all(self) -> list[Booking]:
        return await self._query(None)

    async def search(self, query: str) -> list[Booking]:
        """Case-insensitive literal substring match on the requester email."""
        needle = (query or "").casefold()
        return await self._query(
            lambda d: needle in str(d.get("email", "")).casefold()
        )

    async def _query(self, predicate) -> list[Booking]:
        docs = await self._store.find(BOOKING_COLLECTION, predicate)
        bookings = [Booking.model_validate(d) for d in docs]
        bookings.sort(key=lambda b: b.created_at)
        return bookings
