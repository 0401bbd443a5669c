# moviemeter/core/security.py
from __future__ import annotations

"""
MovieMeter: Password hashing
=============================
- bcrypt via Passlib, per-hash random salt
- Cost factor from `BCRYPT_ROUNDS` (tests lower it to keep the suite fast)
- `verify_password` never raises on a malformed stored hash; it reports a
  mismatch instead so login stays a neutral "Invalid credentials"
"""

import logging

from passlib.context import CryptContext

from moviemeter.core.config import settings

# ───────────────────────────────────────────────
# 🔐 Security Constants and Setup
# ───────────────────────────────────────────────
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)
logger = logging.getLogger(__name__)


# ───────────────────────────────────────────────
# 🔐 Password Hashing Utilities
# ───────────────────────────────────────────────
def get_password_hash(password: str) -> str:
    """Return a salted hash using Passlib's bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time verify of a plaintext password against a stored hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


__all__ = ["pwd_context", "get_password_hash", "verify_password"]
