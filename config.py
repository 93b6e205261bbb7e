"""
Application configuration

Values are read from the environment (and a local .env file, if present).
"""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value in (None, ""):
        return None
    return int(value)


JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-with-a-long-random-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
# Unset means tokens carry no "exp" claim and never expire
JWT_EXPIRES_MINUTES = _optional_int("JWT_EXPIRES_MINUTES")

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))
