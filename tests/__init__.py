"""Test package. Settings are read at import time, so test env vars are set here first."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256-signing")
os.environ.setdefault("JWT_EXPIRE_MINUTES", "60")
# Lowest bcrypt cost keeps the suite fast.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
