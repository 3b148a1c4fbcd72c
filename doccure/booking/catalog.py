"""
Test Catalog — creating and listing bookable test offerings.

Only creation and the upcoming-tests listing live here; availability changes
belong to the SlotLedger.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from doccure.booking.models import TestOffering
from doccure.booking.slot_ledger import TESTS_COLLECTION
from doccure.booking.store import DocumentStore

logger = logging.getLogger("doccure.catalog")


def _today() -> date:
    return datetime.now(timezone.utc).date()


class TestCatalog:
    __test__ = False

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def add(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Validate and store a new offering.  Extra fields are kept as given."""
        offering = TestOffering.model_validate(fields)
        doc = {**fields, **offering.to_document()}
        # Pydantic field names would otherwise sit next to their aliases.
        for name in ("total_slots", "available_date", "id"):
            doc.pop(name, None)
        stored = await self._store.insert_one(TESTS_COLLECTION, doc)
        logger.info(
            "Added test %s (%s) with %d slots",
            stored["_id"], offering.name, offering.slots,
        )
        return stored

    async def upcoming(self, today: date | None = None) -> list[dict[str, Any]]:
        """Offerings available today or later, soonest first."""
        cutoff = (today or _today()).isoformat()
        docs = await self._store.find(
            TESTS_COLLECTION,
            lambda d: str(d.get("availableDate", ""))[:10] >= cutoff,
        )
        docs.sort(key=lambda d: str(d.get("availableDate", "")))
        return docs
