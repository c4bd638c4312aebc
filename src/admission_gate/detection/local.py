"""
admission_gate.detection.local

In-process reference threat detector.

Responsibilities:
- Shield: match request path/query against common attack signatures.
- Bot detection: classify the User-Agent into categories and honor the rule's allow-list.
- Sliding window: per-client moving-window limiting via `limits` (async in-memory storage).
- Report every rule independently; a failing rule yields an ERROR result, not an exception.

Note:
- Detection heuristics here are deliberately simple; production deployments plug a
  vendor capability in behind the same `ThreatDetector` protocol.
"""

from __future__ import annotations

import re
from urllib.parse import unquote_plus

from limits import RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage, Storage
from limits.aio.strategies import MovingWindowRateLimiter

from admission_gate.admission.decision import Conclusion, RawDecision, RuleResult
from admission_gate.admission.rules import (
    BotDetectionRule,
    Mode,
    Rule,
    RuleSet,
    ShieldRule,
    SlidingWindowRule,
)
from admission_gate.detection.protocol import RequestSnapshot

_SHIELD_SIGNATURES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("sql_injection", re.compile(r"(\bunion\b.+\bselect\b|'\s*or\s+'?\d+'?\s*=\s*'?\d+|;\s*drop\s+table)", re.I)),
    ("path_traversal", re.compile(r"(\.\./|\.\.\\|/etc/passwd|/proc/self/)", re.I)),
    ("xss", re.compile(r"(<script\b|javascript:|onerror\s*=)", re.I)),
    ("command_injection", re.compile(r"(;|\||`|\$\()\s*(cat|wget|curl|sh|bash)\b", re.I)),
)

# Order matters: allow-listed categories are checked before the generic automation patterns.
_BOT_CATEGORIES: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "CATEGORY:SEARCH_ENGINE",
        re.compile(r"(googlebot|bingbot|duckduckbot|baiduspider|yandexbot|applebot)", re.I),
    ),
    (
        "CATEGORY:PREVIEW",
        re.compile(
            r"(facebookexternalhit|twitterbot|slackbot|discordbot|linkedinbot|whatsapp|telegrambot)",
            re.I,
        ),
    ),
    (
        "CATEGORY:HTTP",
        re.compile(r"(curl|wget|python-requests|python-httpx|httpie|go-http-client|okhttp|axios)", re.I),
    ),
    ("CATEGORY:AUTOMATED", re.compile(r"(bot\b|crawler|spider|scrapy|headless|phantomjs|selenium)", re.I)),
)


class LocalThreatDetector:
    def __init__(self, *, storage: Storage | None = None) -> None:
        self._limiter = MovingWindowRateLimiter(storage or MemoryStorage())

    async def evaluate(self, snapshot: RequestSnapshot, rule_set: RuleSet) -> RawDecision:
        results = [await self._evaluate_rule(snapshot, rule) for rule in rule_set]
        return RawDecision(results=tuple(results))

    async def _evaluate_rule(self, snapshot: RequestSnapshot, rule: Rule) -> RuleResult:
        try:
            if isinstance(rule, ShieldRule):
                return self._shield(snapshot, rule)
            if isinstance(rule, BotDetectionRule):
                return self._bot(snapshot, rule)
            return await self._sliding_window(snapshot, rule)
        except Exception as e:  # noqa: BLE001 - per-rule failures are reported, not raised
            return RuleResult(rule.name, rule.kind, Conclusion.error, message=str(e) or type(e).__name__)

    def _shield(self, snapshot: RequestSnapshot, rule: ShieldRule) -> RuleResult:
        haystack = unquote_plus(f"{snapshot.path}?{snapshot.query}")
        for signature, pattern in _SHIELD_SIGNATURES:
            if pattern.search(haystack):
                return _verdict(rule, denied=True, details={"signature": signature})
        return _verdict(rule, denied=False)

    def _bot(self, snapshot: RequestSnapshot, rule: BotDetectionRule) -> RuleResult:
        ua = snapshot.user_agent
        if ua is None:
            return RuleResult(
                rule.name,
                rule.kind,
                Conclusion.error,
                message="missing User-Agent header",
                missing_client_id=True,
            )
        category = classify_user_agent(ua)
        if category is None or category in rule.allow:
            return _verdict(rule, denied=False, details={"category": category})
        return _verdict(rule, denied=True, details={"category": category})

    async def _sliding_window(self, snapshot: RequestSnapshot, rule: SlidingWindowRule) -> RuleResult:
        if snapshot.client_ip is None:
            raise ValueError("client address unavailable for rate limiting")
        item = RateLimitItemPerSecond(rule.max_requests, rule.window_seconds)
        allowed = await self._limiter.hit(item, rule.name, snapshot.client_ip)
        stats = await self._limiter.get_window_stats(item, rule.name, snapshot.client_ip)
        return _verdict(
            rule,
            denied=not allowed,
            details={
                "max": rule.max_requests,
                "window_seconds": rule.window_seconds,
                "remaining": stats.remaining,
                "reset_time": stats.reset_time,
            },
        )


def classify_user_agent(user_agent: str) -> str | None:
    for category, pattern in _BOT_CATEGORIES:
        if pattern.search(user_agent):
            return category
    return None


def _verdict(rule: Rule, *, denied: bool, details: dict | None = None) -> RuleResult:
    # DRY_RUN never blocks; it only records what LIVE would have done.
    dry_run = rule.mode is Mode.dry_run
    return RuleResult(
        rule_name=rule.name,
        kind=rule.kind,
        conclusion=Conclusion.deny if denied and not dry_run else Conclusion.allow,
        would_deny=denied and dry_run,
        details=details or {},
    )


# --- Module Notes -----------------------------------------------------------
# Rate-limit counters are keyed by (rule name, client ip); the rule name embeds the tier
# ("guest-rate-limit"), so a client that signs in moves to a separate counter.
