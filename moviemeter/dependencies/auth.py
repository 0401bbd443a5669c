from __future__ import annotations

"""
Auth gateway
============
Resolves the caller's identity from the `Authorization` header before any
protected handler runs.

- `Bearer <token>` (scheme matched case-insensitively) or a bare token
- Missing/blank header → 401 "No authorization header"
- `Bearer` with nothing after it → 401 "No token provided"
- Bad signature / malformed → 401 "Invalid token"; past expiry → 401 "Token expired"
- No signing secret configured → 500 "Server configuration error"

On success the user id is stored on `request.state.user_id` and an
`Identity` is returned to the handler. Nothing is persisted.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request

from moviemeter.core.exceptions import ExpiredToken, InvalidToken, Unauthenticated
from moviemeter.services.token_service import TokenService, get_token_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: UUID


def parse_authorization(value: Optional[str]) -> str:
    """Extract the raw token from an `Authorization` header value."""
    raw = (value or "").strip()
    if not raw:
        raise Unauthenticated("No authorization header")

    scheme, _, rest = raw.partition(" ")
    if scheme.lower() == "bearer":
        token = rest.strip()
        if not token:
            raise Unauthenticated("No token provided")
        return token
    return raw


def authenticate(value: Optional[str], tokens: TokenService) -> Identity:
    token = parse_authorization(value)
    try:
        claims = tokens.verify(token)
    except ExpiredToken:
        raise Unauthenticated("Token expired", code="token_expired")
    except InvalidToken:
        raise Unauthenticated("Invalid token", code="invalid_token")
    return Identity(user_id=claims.user_id)


async def require_identity(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """FastAPI dependency guarding protected routes."""
    identity = authenticate(request.headers.get("Authorization"), tokens)
    request.state.user_id = identity.user_id
    logger.debug(f"Authenticated user {identity.user_id}")
    return identity


__all__ = ["Identity", "parse_authorization", "authenticate", "require_identity"]
