"""
Shared fixtures for booking-core tests.
The store is the real DocumentStore over an in-memory bucket (see the
root conftest), connected and seeded per test.
"""

import pytest
import pytest_asyncio

from doccure.booking.discounts import DiscountEngine
from doccure.booking.lifecycle import BookingLifecycle
from doccure.booking.permissions import AuthorizationGate
from doccure.booking.principal import Principal
from doccure.booking.slot_ledger import SlotLedger
from doccure.booking.store import DocumentStore


TESTS = [
    {"_id": "T-ONE", "name": "Lipid Profile", "slots": 1, "totalSlots": 1,
     "price": 40.0, "availableDate": "2030-01-10"},
    {"_id": "T-FIVE", "name": "Complete Blood Count", "slots": 5, "totalSlots": 5,
     "price": 25.5, "availableDate": "2030-01-11"},
    {"_id": "T-EMPTY", "name": "Thyroid Panel", "slots": 0, "totalSlots": 3,
     "price": 60.0, "availableDate": "2030-01-12"},
    {"_id": "T-LEGACY", "name": "Vitamin D", "slots": "2", "price": 30.0,
     "availableDate": "2030-01-13"},
]

BANNERS = [
    {"_id": "B-1", "title": "Winter sale", "couponCode": "ACTIVE10",
     "couponRate": 10, "isActive": True},
    {"_id": "B-2", "title": "Old promo", "couponCode": "EXPIRED20",
     "couponRate": 20, "isActive": False},
    {"_id": "B-3", "title": "Legacy promo", "couponCode": "LEGACY15",
     "couponRate": "15", "isActive": "true"},
    {"_id": "B-4", "title": "No rate", "couponCode": "NORATE", "isActive": True},
]

USERS = [
    {"_id": "U-1", "email": "patient@example.com", "role": "user"},
    {"_id": "U-2", "email": "admin@example.com", "role": "admin"},
]


@pytest_asyncio.fixture
async def store(gcs):
    store = DocumentStore(gcs, database_name="doccure-test")
    await store.connect()
    await store.seed("tests", TESTS)
    await store.seed("banner", BANNERS)
    await store.seed("users", USERS)
    yield store
    await store.close()


@pytest.fixture
def ledger(store):
    return SlotLedger(store)


@pytest.fixture
def gate():
    return AuthorizationGate()


@pytest.fixture
def discounts(store):
    return DiscountEngine(store)


@pytest.fixture
def lifecycle(store, ledger, gate):
    return BookingLifecycle(store, ledger, gate, release_on_cancel=True)


@pytest.fixture
def patient():
    return Principal(email="patient@example.com", is_admin=False)


@pytest.fixture
def stranger():
    return Principal(email="someone.else@example.com", is_admin=False)


@pytest.fixture
def admin():
    return Principal(email="admin@example.com", is_admin=True)
