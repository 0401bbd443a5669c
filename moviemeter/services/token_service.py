# moviemeter/services/token_service.py

from __future__ import annotations

"""
MovieMeter: Identity Token Service
===================================
- Issues signed, time-limited identity tokens (HS* JWTs via python-jose)
- Verifies signature + expiry and returns the embedded user id
- Stateless: no session store, no revocation lane; logout is a client-side
  discard

Claims
------
``sub`` (user id), ``email`` (optional, informational), ``iat``, ``exp``
(``iat + ACCESS_TOKEN_EXPIRE_DAYS``).

Failures
--------
- `InvalidToken`       → bad signature, malformed token, missing/invalid `sub`
- `ExpiredToken`       → past `exp`
- `ConfigurationFault` → no signing secret configured (server-side fault)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from moviemeter.core.config import settings
from moviemeter.core.exceptions import ConfigurationFault, ExpiredToken, InvalidToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    issued_at: datetime
    expires_at: datetime


def _as_utc(ts: Any) -> datetime:
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


class TokenService:
    """Issue and verify identity tokens with a shared secret."""

    def __init__(self, secret: Optional[str], *, algorithm: str = "HS256", ttl_days: int = 7) -> None:
        self._secret = secret or None
        self.algorithm = algorithm
        self.ttl = timedelta(days=ttl_days)

    @classmethod
    def from_settings(cls) -> "TokenService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.JWT_ALGORITHM,
            ttl_days=settings.ACCESS_TOKEN_EXPIRE_DAYS,
        )

    def _require_secret(self) -> str:
        if not self._secret:
            logger.error("JWT secret is not configured")
            raise ConfigurationFault()
        return self._secret

    # ─────────────────────────────────────────────────────────────
    # 🎟️ Issue
    # ─────────────────────────────────────────────────────────────
    def issue(
        self,
        user_id: UUID | str,
        *,
        email: Optional[str] = None,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """Sign a token for `user_id` valid for the configured lifetime.

        `issued_at` defaults to now; passing a past instant yields a token
        that is already expired once `issued_at + ttl` is behind us.
        """
        secret = self._require_secret()
        now = issued_at or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        if email:
            payload["email"] = email
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    # ─────────────────────────────────────────────────────────────
    # 🔓 Verify
    # ─────────────────────────────────────────────────────────────
    def verify(self, token: str) -> TokenClaims:
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.info("Token expired")
            raise ExpiredToken()
        except JWTError as e:
            logger.warning(f"JWT decoding failed: {e}")
            raise InvalidToken()

        sub = payload.get("sub")
        try:
            user_id = UUID(str(sub))
        except (TypeError, ValueError):
            logger.warning("Token subject is missing or not a user id")
            raise InvalidToken()

        if "exp" not in payload:
            raise InvalidToken()
        issued = payload.get("iat", payload["exp"])
        try:
            return TokenClaims(user_id=user_id, issued_at=_as_utc(issued), expires_at=_as_utc(payload["exp"]))
        except (TypeError, ValueError, OverflowError):
            raise InvalidToken()


_default: Optional[TokenService] = None


def get_token_service() -> TokenService:
    """FastAPI dependency returning the process-wide token service."""
    global _default
    if _default is None:
        _default = TokenService.from_settings()
    return _default


__all__ = ["TokenClaims", "TokenService", "get_token_service"]
