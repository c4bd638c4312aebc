"""
admission_gate.admission.tiers

Role policy table: role -> rate-limit tier.

Responsibilities:
- Define the immutable `RateLimitTier` value.
- Build the process-wide `RolePolicyTable` once (defaults or per-deployment settings).
- Resolve a tier for any role value, defaulting to guest.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from admission_gate.auth.models import Role
from admission_gate.settings import Settings


@dataclass(frozen=True, slots=True)
class RateLimitTier:
    role_name: str
    window_seconds: int
    max_requests: int

    @property
    def tier_label(self) -> str:
        return f"{self.role_name}-rate-limit"


@dataclass(frozen=True, slots=True)
class RolePolicyTable:
    tiers: Mapping[Role, RateLimitTier]

    def __post_init__(self) -> None:
        if Role.guest not in self.tiers:
            raise ValueError("policy table requires a guest tier")
        # Freeze the mapping itself, not just the attribute binding.
        object.__setattr__(self, "tiers", MappingProxyType(dict(self.tiers)))

    @classmethod
    def build(
        cls, *, admin: int = 20, user: int = 10, guest: int = 5, window_seconds: int = 60
    ) -> RolePolicyTable:
        return cls(
            tiers={
                Role.admin: RateLimitTier("admin", window_seconds, admin),
                Role.user: RateLimitTier("user", window_seconds, user),
                Role.guest: RateLimitTier("guest", window_seconds, guest),
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> RolePolicyTable:
        return cls.build(
            admin=settings.admin_rate_limit,
            user=settings.user_rate_limit,
            guest=settings.guest_rate_limit,
            window_seconds=settings.rate_limit_window_seconds,
        )

    def tier_for(self, role: object) -> RateLimitTier:
        # Unknown roles fall back to the most restrictive tier, never to "unlimited".
        parsed = role if isinstance(role, Role) else Role.parse(role)
        return self.tiers.get(parsed, self.tiers[Role.guest])


DEFAULT_POLICY_TABLE = RolePolicyTable.build()


def tier_for(role: object, table: RolePolicyTable = DEFAULT_POLICY_TABLE) -> RateLimitTier:
    return table.tier_for(role)


# --- Module Notes -----------------------------------------------------------
# The app builds one table from settings at startup and passes it to the evaluator;
# nothing mutates it afterwards, so concurrent reads need no locking.
