"""
admission_gate.admission.errors

Admission failure taxonomy.

Responsibilities:
- Typed signals for every terminal outcome of the admission chain.
- Carry just enough context for the translator and the audit log.
"""

from __future__ import annotations

from collections.abc import Iterable

from admission_gate.admission.decision import DecisionReason


class AdmissionError(Exception):
    """Base for terminal admission outcomes."""


class Unauthenticated(AdmissionError):
    def __init__(self, message: str = "No active session found") -> None:
        super().__init__(message)
        self.message = message


class Forbidden(AdmissionError):
    def __init__(self, *, role: str, required: Iterable[str]) -> None:
        self.role = role
        self.required = tuple(required)
        super().__init__(f"role {role!r} not in {self.required}")


class MissingClientIdentifier(AdmissionError):
    pass


class Denied(AdmissionError):
    def __init__(self, reason: DecisionReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


class InternalAuthError(AdmissionError):
    pass


class EvaluationFailure(AdmissionError):
    pass


# --- Module Notes -----------------------------------------------------------
# `MissingClientIdentifier` and `Denied` are produced from a `Decision` by the translator;
# the resolver and evaluator raise the others directly.
