"""
admission_gate.auth.models

Auth domain models.

Responsibilities:
- Define the closed role set used by RBAC and rate-limit tiers.
- Define the request-scoped caller identity (`Identity`).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class Role(enum.StrEnum):
    admin = "admin"
    user = "user"
    guest = "guest"

    @classmethod
    def parse(cls, value: object) -> Role:
        # Anything outside the closed set is a guest; never widen privileges on bad input.
        try:
            return cls(str(value))
        except ValueError:
            return cls.guest


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Resolved caller identity. Lives for one request only.
    """

    id: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin

    @classmethod
    def from_session_user(cls, user: Mapping[str, Any]) -> Identity:
        return cls(id=int(user["id"]), email=str(user["email"]), role=Role.parse(user.get("role")))

    def as_session_user(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role.value}


@dataclass(frozen=True, slots=True)
class SessionContext:
    """
    Server-side session as hydrated for one request. Opaque beyond `user`.
    """

    id: str
    user: Mapping[str, Any] | None = None

    @property
    def role(self) -> Role:
        # Unauthenticated sessions are rate limited as guests.
        if not self.user:
            return Role.guest
        return Role.parse(self.user.get("role"))


# --- Module Notes -----------------------------------------------------------
# `as_session_user` / `from_session_user` define the JSON shape stored in the
# `sessions.user_payload` column.
