"""Core app configuration, database session and security primitives."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.security import TokenCodec, TokenError, get_token_codec, hash_password, verify_password

__all__ = [
    "TokenCodec",
    "TokenError",
    "get_db",
    "get_settings",
    "get_token_codec",
    "hash_password",
    "settings",
    "verify_password",
]
