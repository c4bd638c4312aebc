"""
admission_gate.admission.evaluator

Security decision evaluator.

Responsibilities:
- Resolve the caller's tier and build the per-request rule set.
- Delegate evaluation to the threat-detection capability.
- Normalize the multi-result answer into exactly one verdict and one reason:
  - per-rule evaluation errors fail open (logged, never a denial),
  - a missing client identifier denies unconditionally,
  - otherwise deny reasons follow BOT > SHIELD > RATE_LIMIT.
- Fail closed (`EvaluationFailure`) when the capability itself cannot answer.
"""

from __future__ import annotations

from typing import Literal

from admission_gate.admission.decision import (
    Decision,
    DecisionReason,
    RawDecision,
    Verdict,
    deny_reason,
)
from admission_gate.admission.errors import EvaluationFailure
from admission_gate.admission.rules import Mode, build_rule_set
from admission_gate.admission.tiers import RolePolicyTable
from admission_gate.auth.models import Role
from admission_gate.detection.protocol import RequestSnapshot, ThreatDetector
from admission_gate.observability.logging import get_logger

log = get_logger(__name__)


class SecurityEvaluator:
    def __init__(
        self,
        *,
        detector: ThreatDetector,
        policy: RolePolicyTable,
        mode: Mode | str = Mode.dry_run,
        rate_limit_mode: Literal["LIVE", "INHERIT"] = "LIVE",
    ) -> None:
        self._detector = detector
        self._policy = policy
        self._mode = Mode(mode)
        self._rate_limit_mode = rate_limit_mode

    async def evaluate(self, snapshot: RequestSnapshot, role: Role | str | None) -> Decision:
        tier = self._policy.tier_for(role if role is not None else Role.guest)
        rule_set = build_rule_set(tier, mode=self._mode, rate_limit_mode=self._rate_limit_mode)

        try:
            raw = await self._detector.evaluate(snapshot, rule_set)
        except Exception as e:
            # No decision at all: fail closed, and do not retry (avoid amplifying load).
            log.error("security_evaluation_failed", tier=tier.tier_label, exc_info=True)
            raise EvaluationFailure("threat detection unavailable") from e

        return normalize(raw, tier_label=tier.tier_label, snapshot=snapshot)


def normalize(raw: RawDecision, *, tier_label: str, snapshot: RequestSnapshot | None = None) -> Decision:
    ctx = _log_context(snapshot)

    for result in raw.results:
        if result.is_error and not result.missing_client_id:
            log.warning(
                "rule_evaluation_error",
                rule=result.rule_name,
                error=result.message,
                **ctx,
            )
        elif result.would_deny:
            log.info("dry_run_would_deny", rule=result.rule_name, details=dict(result.details), **ctx)

    # Without a client identifier the other verdicts cannot be trusted.
    if any(r.missing_client_id for r in raw.results):
        return Decision(
            verdict=Verdict.deny,
            reason=DecisionReason.missing_client_id,
            tier_label=tier_label,
            results=raw.results,
        )

    if raw.is_denied:
        return Decision(
            verdict=Verdict.deny,
            reason=deny_reason(raw.results),
            tier_label=tier_label,
            results=raw.results,
        )

    return Decision(
        verdict=Verdict.allow,
        reason=DecisionReason.none,
        tier_label=tier_label,
        results=raw.results,
    )


def _log_context(snapshot: RequestSnapshot | None) -> dict[str, str | None]:
    if snapshot is None:
        return {}
    return {"ip": snapshot.client_ip, "user_agent": snapshot.user_agent, "path": snapshot.path}


# --- Module Notes -----------------------------------------------------------
# `normalize` is pure apart from logging, so precedence and error tolerance are tested
# against hand-built `RawDecision` values without any detector.
