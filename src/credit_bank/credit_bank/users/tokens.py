from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_TOKEN_TTL_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError

JWT_ALGO = "HS256"


class TokenIssuer:
    """Signs and verifies bearer tokens (HS256 JWT).

    Payload:
      - sub: user id (string, as required by PyJWT >= 2.10)
      - role
      - iat, exp
    """

    def __init__(self, secret: str, *, ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(hours=int(ttl_hours))

    def issue(self, *, user_id: int, role: Role, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGO)

    def decode(self, token: str) -> dict:
        """Returns the payload if valid, else raises AuthenticationError."""

        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGO])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        try:
            return {"user_id": int(payload["sub"]), "role": Role(payload["role"])}
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token")
