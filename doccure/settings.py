"""
Centralized configuration for the Doccure booking service.
Values come from the environment (or a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Server ---
PORT = int(os.getenv("PORT", "4000"))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

# --- Auth ---
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "")
TOKEN_COOKIE_NAME = "token"

# --- Storage ---
GCS_BUCKET_NAME = os.getenv("GCS_BUCKET_NAME", "doccure-booking")
# Service account key file; default credentials are used when unset.
GCS_SERVICE_ACCOUNT_JSON = os.getenv("GCS_SERVICE_ACCOUNT_JSON") or None
# Object prefix inside the bucket
DATABASE_NAME = os.getenv("DATABASE_NAME", "doccure")
SEED_FILE = os.getenv("SEED_FILE", "")

# --- Payments ---
# SCRIPE_SECRET_KEY is the name older deployments used.
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY") or os.getenv("SCRIPE_SECRET_KEY", "")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")

# --- Booking policy ---
RELEASE_SLOT_ON_CANCEL = _flag("RELEASE_SLOT_ON_CANCEL", "true")
