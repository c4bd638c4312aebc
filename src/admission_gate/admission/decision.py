"""
admission_gate.admission.decision

Decision data model.

Responsibilities:
- Per-rule sub-results as reported by the threat-detection capability (`RuleResult`).
- The raw multi-result decision returned by the capability (`RawDecision`).
- The normalized, single-verdict decision consumed by the pipeline (`Decision`).
- The explicit deny-reason precedence.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class RuleKind(enum.StrEnum):
    shield = "SHIELD"
    bot = "BOT"
    rate_limit = "RATE_LIMIT"


class Conclusion(enum.StrEnum):
    # ERROR means the rule could not be evaluated; it is never a security verdict.
    allow = "ALLOW"
    deny = "DENY"
    error = "ERROR"


class Verdict(enum.StrEnum):
    allow = "ALLOW"
    deny = "DENY"


class DecisionReason(enum.StrEnum):
    rate_limit = "RATE_LIMIT"
    bot = "BOT"
    shield = "SHIELD"
    missing_client_id = "MISSING_CLIENT_ID"
    none = "NONE"


# Most severe first: confirmed automation, then perimeter threats, then quota exhaustion.
DENY_PRECEDENCE: tuple[tuple[RuleKind, DecisionReason], ...] = (
    (RuleKind.bot, DecisionReason.bot),
    (RuleKind.shield, DecisionReason.shield),
    (RuleKind.rate_limit, DecisionReason.rate_limit),
)


@dataclass(frozen=True, slots=True)
class RuleResult:
    rule_name: str
    kind: RuleKind
    conclusion: Conclusion
    message: str | None = None
    # Set when the request lacks the header the capability needs to track the client.
    missing_client_id: bool = False
    # DRY_RUN rules report ALLOW but record what they would have concluded.
    would_deny: bool = False
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.conclusion is Conclusion.error

    @property
    def is_denied(self) -> bool:
        return self.conclusion is Conclusion.deny


@dataclass(frozen=True, slots=True)
class RawDecision:
    results: tuple[RuleResult, ...]

    @property
    def is_denied(self) -> bool:
        return any(r.is_denied for r in self.results)


@dataclass(frozen=True, slots=True)
class Decision:
    verdict: Verdict
    reason: DecisionReason
    tier_label: str
    results: tuple[RuleResult, ...] = ()

    @property
    def is_allowed(self) -> bool:
        return self.verdict is Verdict.allow

    @property
    def errors(self) -> tuple[RuleResult, ...]:
        return tuple(r for r in self.results if r.is_error)


def deny_reason(results: tuple[RuleResult, ...]) -> DecisionReason:
    """
    Pick the reason for a denied decision by precedence, not by rule evaluation order.
    """

    denied_kinds = {r.kind for r in results if r.is_denied}
    for kind, reason in DENY_PRECEDENCE:
        if kind in denied_kinds:
            return reason
    return DecisionReason.none


# --- Module Notes -----------------------------------------------------------
# Normalization (error tolerance, missing-client-id override) lives in
# `admission.evaluator`; this module only holds values and the precedence table.
