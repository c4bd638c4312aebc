"""
tests.test_evaluator

Security decision evaluator.

Responsibilities:
- Tier/rule-set selection from the caller's role.
- Per-rule fail-open, missing-client-id override, deny-reason precedence.
- Fail-closed on capability failure; idempotence against a stateless capability.
"""

from __future__ import annotations

import pytest
from conftest import BROWSER_UA, StubDetector

from admission_gate.admission.decision import (
    Conclusion,
    DecisionReason,
    RawDecision,
    RuleKind,
    RuleResult,
    Verdict,
)
from admission_gate.admission.errors import EvaluationFailure
from admission_gate.admission.evaluator import SecurityEvaluator, normalize
from admission_gate.admission.rules import SlidingWindowRule
from admission_gate.admission.tiers import DEFAULT_POLICY_TABLE
from admission_gate.detection.protocol import RequestSnapshot

SNAPSHOT = RequestSnapshot(
    client_ip="203.0.113.7",
    method="GET",
    path="/api",
    headers={"User-Agent": BROWSER_UA},
)


def _ok(kind: RuleKind) -> RuleResult:
    return RuleResult(kind.value.lower(), kind, Conclusion.allow)


def _deny(kind: RuleKind) -> RuleResult:
    return RuleResult(kind.value.lower(), kind, Conclusion.deny)


def _error(kind: RuleKind, *, missing_client_id: bool = False) -> RuleResult:
    return RuleResult(
        kind.value.lower(), kind, Conclusion.error, message="engine error", missing_client_id=missing_client_id
    )


def _evaluator(detector: StubDetector) -> SecurityEvaluator:
    return SecurityEvaluator(detector=detector, policy=DEFAULT_POLICY_TABLE)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("role", "label", "max_requests"),
    [(None, "guest-rate-limit", 5), ("user", "user-rate-limit", 10), ("admin", "admin-rate-limit", 20), ("root", "guest-rate-limit", 5)],
)
async def test_rule_set_follows_role_tier(role, label: str, max_requests: int) -> None:
    detector = StubDetector(results=[_ok(RuleKind.shield)])
    decision = await _evaluator(detector).evaluate(SNAPSHOT, role)

    assert decision.tier_label == label
    _, rule_set = detector.calls[0]
    window = [r for r in rule_set if isinstance(r, SlidingWindowRule)][0]
    assert (window.name, window.max_requests) == (label, max_requests)


@pytest.mark.asyncio
async def test_all_allow_is_allowed() -> None:
    detector = StubDetector(results=[_ok(k) for k in RuleKind])
    decision = await _evaluator(detector).evaluate(SNAPSHOT, "user")
    assert decision.verdict is Verdict.allow
    assert decision.reason is DecisionReason.none


@pytest.mark.asyncio
async def test_single_rule_error_fails_open() -> None:
    detector = StubDetector(
        results=[_error(RuleKind.shield), _ok(RuleKind.bot), _ok(RuleKind.rate_limit)]
    )
    decision = await _evaluator(detector).evaluate(SNAPSHOT, "guest")
    assert decision.is_allowed
    assert [r.rule_name for r in decision.errors] == ["shield"]


@pytest.mark.asyncio
async def test_rule_error_does_not_hide_other_denials() -> None:
    detector = StubDetector(
        results=[_error(RuleKind.shield), _ok(RuleKind.bot), _deny(RuleKind.rate_limit)]
    )
    decision = await _evaluator(detector).evaluate(SNAPSHOT, "guest")
    assert decision.verdict is Verdict.deny
    assert decision.reason is DecisionReason.rate_limit


def test_missing_client_identifier_beats_rate_limit() -> None:
    raw = RawDecision(
        results=(
            _ok(RuleKind.shield),
            _error(RuleKind.bot, missing_client_id=True),
            _deny(RuleKind.rate_limit),
        )
    )
    decision = normalize(raw, tier_label="guest-rate-limit")
    assert decision.verdict is Verdict.deny
    assert decision.reason is DecisionReason.missing_client_id


def test_missing_client_identifier_denies_even_when_everything_else_allows() -> None:
    raw = RawDecision(results=(_ok(RuleKind.shield), _error(RuleKind.bot, missing_client_id=True)))
    assert normalize(raw, tier_label="x").reason is DecisionReason.missing_client_id


@pytest.mark.parametrize(
    ("denied", "expected"),
    [
        ((RuleKind.shield, RuleKind.rate_limit), DecisionReason.shield),
        ((RuleKind.rate_limit, RuleKind.shield), DecisionReason.shield),
        ((RuleKind.rate_limit, RuleKind.bot), DecisionReason.bot),
        ((RuleKind.shield, RuleKind.bot, RuleKind.rate_limit), DecisionReason.bot),
        ((RuleKind.rate_limit,), DecisionReason.rate_limit),
    ],
)
def test_deny_reason_precedence_ignores_result_order(denied, expected) -> None:
    raw = RawDecision(results=tuple(_deny(k) for k in denied))
    decision = normalize(raw, tier_label="user-rate-limit")
    assert decision.verdict is Verdict.deny
    assert decision.reason is expected


def test_dry_run_would_deny_is_not_a_denial() -> None:
    raw = RawDecision(
        results=(RuleResult("bot-detection", RuleKind.bot, Conclusion.allow, would_deny=True),)
    )
    assert normalize(raw, tier_label="guest-rate-limit").is_allowed


@pytest.mark.asyncio
async def test_capability_failure_fails_closed() -> None:
    detector = StubDetector(exc=ConnectionError("detector unreachable"))
    with pytest.raises(EvaluationFailure):
        await _evaluator(detector).evaluate(SNAPSHOT, "admin")
    # No automatic retry.
    assert len(detector.calls) == 1


@pytest.mark.asyncio
async def test_same_snapshot_yields_same_decision() -> None:
    detector = StubDetector(results=[_deny(RuleKind.shield), _error(RuleKind.rate_limit)])
    evaluator = _evaluator(detector)

    first = await evaluator.evaluate(SNAPSHOT, "user")
    second = await evaluator.evaluate(SNAPSHOT, "user")
    assert first == second
    assert first.reason is DecisionReason.shield


# --- Module Notes -----------------------------------------------------------
# The reference detector's own heuristics are covered in `test_local_detector.py`.
