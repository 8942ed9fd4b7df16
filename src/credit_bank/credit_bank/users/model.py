from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a portal account.

    Plain data object; no database access here.
    """

    user_id: int
    email: str
    display_name: str
    password_hash: str
    role: Role
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_public(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class Identity:
    """Who is calling: the result of verifying a bearer credential."""

    user_id: int
    role: Role
    email: str
