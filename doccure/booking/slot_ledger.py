"""
Slot Ledger — the only code path that changes a test offering's availability.

``reserve`` and ``release`` are single conditional increments on the store,
so the "check there is a slot, then take it" step can never interleave with
another request touching the same offering.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from doccure.booking.errors import BookingError, CapacityExhaustedError, NotFoundError
from doccure.booking.models import TestOffering
from doccure.booking.store import DocumentStore

logger = logging.getLogger("doccure.slot_ledger")

TESTS_COLLECTION = "tests"
SLOTS_FIELD = "slots"


def _available(doc: dict) -> int:
    # Older catalog documents carry slot counts as strings.
    return int(doc.get(SLOTS_FIELD) or 0)


def _has_room(doc: dict) -> bool:
    # Documents created before totalSlots was recorded have no upper bound.
    total = doc.get("totalSlots")
    return total is None or _available(doc) < int(total)


class SlotLedger:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def reserve(self, test_id: str) -> TestOffering:
        """
        Take one slot from a test offering.

        Raises CapacityExhaustedError when no slot remains and NotFoundError
        when the offering does not exist.  A catalog entry that cannot be
        read as an offering is refused before any slot is taken.
        """
        offering = await self._offering(test_id)
        try:
            doc = await self._store.conditional_increment(
                TESTS_COLLECTION,
                test_id,
                SLOTS_FIELD,
                -1,
                guard=lambda d: _available(d) > 0,
            )
        except NotFoundError:
            logger.info("Reserve refused: test %s not found", test_id)
            raise NotFoundError(f"Test {test_id} not found") from None

        if doc is None:
            logger.warning("Reserve refused: test %s has no slots left", test_id)
            raise CapacityExhaustedError(f"No slots left for test {test_id}")

        logger.info("Reserved slot on test %s (available=%s)", test_id, doc[SLOTS_FIELD])
        return offering.model_copy(update={"slots": _available(doc)})

    async def release(self, test_id: str) -> TestOffering:
        """
        Return one slot to a test offering.

        Never raises availability above the offering's total; releasing into a
        full offering leaves it unchanged.
        """
        offering = await self._offering(test_id)
        try:
            doc = await self._store.conditional_increment(
                TESTS_COLLECTION,
                test_id,
                SLOTS_FIELD,
                1,
                guard=_has_room,
            )
        except NotFoundError:
            logger.info("Release refused: test %s not found", test_id)
            raise NotFoundError(f"Test {test_id} not found") from None

        if doc is None:
            logger.warning("Release ignored: test %s is already at full capacity", test_id)
            return offering

        logger.info("Released slot on test %s (available=%s)", test_id, doc[SLOTS_FIELD])
        return offering.model_copy(update={"slots": _available(doc)})

    async def availability(self, test_id: str) -> int:
        doc = await self._store.find_one(TESTS_COLLECTION, test_id)
        if doc is None:
            raise NotFoundError(f"Test {test_id} not found")
        return _available(doc)

    async def _offering(self, test_id: str) -> TestOffering:
        doc = await self._store.find_one(TESTS_COLLECTION, test_id)
        if doc is None:
            logger.info("Test %s not found", test_id)
            raise NotFoundError(f"Test {test_id} not found")
        try:
            return TestOffering.model_validate(doc)
        except ValidationError as e:
            logger.error("Catalog entry for test %s is invalid: %s", test_id, e)
            raise BookingError(f"Test {test_id} has an invalid catalog entry") from None
