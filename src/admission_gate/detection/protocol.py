"""
admission_gate.detection.protocol

Capability contract and the request snapshot it consumes.

Responsibilities:
- `RequestSnapshot`: framework-free, immutable view of one inbound request.
- `ThreatDetector`: `evaluate(snapshot, rule_set) -> RawDecision`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from starlette.requests import Request

from admission_gate.admission.decision import RawDecision
from admission_gate.admission.rules import RuleSet


@dataclass(frozen=True, slots=True)
class RequestSnapshot:
    client_ip: str | None
    method: str
    path: str
    query: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        lowered = {k.lower(): v for k, v in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(lowered))

    @property
    def user_agent(self) -> str | None:
        ua = self.headers.get("user-agent", "").strip()
        return ua or None

    @classmethod
    def from_request(cls, request: Request, *, trust_forwarded_for: bool = False) -> RequestSnapshot:
        client_ip = request.client.host if request.client else None
        if trust_forwarded_for:
            # Left-most entry is the original client when a trusted proxy appends to the chain.
            forwarded = request.headers.get("x-forwarded-for", "")
            first = forwarded.split(",")[0].strip()
            if first:
                client_ip = first
        return cls(
            client_ip=client_ip,
            method=request.method,
            path=request.url.path,
            query=request.url.query,
            headers=dict(request.headers),
        )


class ThreatDetector(Protocol):
    """
    Must be safe for concurrent calls and must report per-rule evaluation failures as
    `Conclusion.ERROR` results rather than raising.
    """

    async def evaluate(self, snapshot: RequestSnapshot, rule_set: RuleSet) -> RawDecision: ...


# --- Module Notes -----------------------------------------------------------
# Raising from `evaluate` means "no decision could be made"; the evaluator turns that
# into a fail-closed `EvaluationFailure`.
