"""
admission_gate.admission.rules

Security rule definitions and per-request rule-set construction.

Responsibilities:
- Describe the rules the threat-detection capability evaluates (shield, bot, sliding window).
- Build a fresh `RuleSet` from a rate-limit tier with no hidden state.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

from admission_gate.admission.decision import RuleKind
from admission_gate.admission.tiers import RateLimitTier


class Mode(enum.StrEnum):
    live = "LIVE"
    dry_run = "DRY_RUN"


# Benign automation allowed through bot detection (crawlers and link unfurlers).
ALLOWED_BOT_CATEGORIES: tuple[str, ...] = ("CATEGORY:SEARCH_ENGINE", "CATEGORY:PREVIEW")


@dataclass(frozen=True, slots=True)
class ShieldRule:
    mode: Mode
    name: str = "shield"
    kind: RuleKind = RuleKind.shield


@dataclass(frozen=True, slots=True)
class BotDetectionRule:
    mode: Mode
    allow: tuple[str, ...] = ALLOWED_BOT_CATEGORIES
    name: str = "bot-detection"
    kind: RuleKind = RuleKind.bot


@dataclass(frozen=True, slots=True)
class SlidingWindowRule:
    mode: Mode
    window_seconds: int
    max_requests: int
    name: str
    kind: RuleKind = RuleKind.rate_limit


Rule = ShieldRule | BotDetectionRule | SlidingWindowRule


@dataclass(frozen=True, slots=True)
class RuleSet:
    rules: tuple[Rule, ...]

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def build_rule_set(
    tier: RateLimitTier,
    *,
    mode: Mode | str = Mode.dry_run,
    rate_limit_mode: Literal["LIVE", "INHERIT"] = "LIVE",
) -> RuleSet:
    mode = Mode(mode)
    window_mode = Mode.live if rate_limit_mode == "LIVE" else mode
    return RuleSet(
        rules=(
            ShieldRule(mode=mode),
            BotDetectionRule(mode=mode),
            SlidingWindowRule(
                mode=window_mode,
                window_seconds=tier.window_seconds,
                max_requests=tier.max_requests,
                name=tier.tier_label,
            ),
        )
    )


# --- Module Notes -----------------------------------------------------------
# `rate_limit_mode="LIVE"` keeps per-role quotas enforced even when shield/bot run
# in DRY_RUN; "INHERIT" makes the sliding window observe-only too.
