"""
Shared fixtures for the HTTP test suite.
Each test gets a freshly started app whose store sits on an in-memory
bucket and is seeded from a JSON fixture file.  Stripe is never
contacted (tests patch PaymentIntent.create).
"""

import json
from datetime import date, timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from doccure import settings

TOKEN_SECRET = "http-test-secret-0123456789abcdef-0123456789"

PATIENT_EMAIL = "patient@example.com"
OTHER_EMAIL = "other@example.com"
ADMIN_EMAIL = "admin@example.com"


def _seed_data() -> dict:
    today = date.today()
    return {
        "tests": [
            {"_id": "T-ONE", "name": "Lipid Profile", "slots": 1, "totalSlots": 1,
             "price": 40.0, "availableDate": (today + timedelta(days=3)).isoformat()},
            {"_id": "T-FIVE", "name": "Complete Blood Count", "slots": 5, "totalSlots": 5,
             "price": 25.5, "availableDate": (today + timedelta(days=1)).isoformat()},
            {"_id": "T-PAST", "name": "Glucose Fasting", "slots": 4, "totalSlots": 4,
             "price": 15.0, "availableDate": (today - timedelta(days=5)).isoformat()},
        ],
        "banner": [
            {"_id": "B-1", "title": "Winter sale", "couponCode": "ACTIVE10",
             "couponRate": 10, "isActive": True},
            {"_id": "B-2", "title": "Old promo", "couponCode": "EXPIRED20",
             "couponRate": 20, "isActive": False},
        ],
        "users": [
            {"_id": "U-1", "email": PATIENT_EMAIL, "role": "user"},
            {"_id": "U-2", "email": OTHER_EMAIL, "role": "user"},
            {"_id": "U-3", "email": ADMIN_EMAIL, "role": "admin"},
        ],
    }


def auth_headers(email: str) -> dict:
    token = jwt.encode({"email": email}, TOKEN_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(_seed_data()))
    return str(path)


@pytest.fixture
def test_client(seed_file, gcs, monkeypatch):
    """A started app with a freshly seeded store on an in-memory bucket."""
    from doccure import dependencies
    monkeypatch.setattr(dependencies, "get_gcs", lambda: gcs)
    monkeypatch.setattr(settings, "SEED_FILE", seed_file)
    monkeypatch.setattr(settings, "ACCESS_TOKEN_SECRET", TOKEN_SECRET)
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(settings, "RELEASE_SLOT_ON_CANCEL", True)

    from doccure.app import app
    with TestClient(app) as client:
        yield client


@pytest.fixture
def patient_headers():
    return auth_headers(PATIENT_EMAIL)


@pytest.fixture
def other_headers():
    return auth_headers(OTHER_EMAIL)


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_EMAIL)
