"""
admission_gate.admission.translator

Decision/failure -> HTTP response translation.

Responsibilities:
- Pure mapping from a `Decision` or `AdmissionError` to `(status_code, body)`.
- Write the audit line for every rejection before the response is produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from admission_gate.admission.decision import Decision, DecisionReason
from admission_gate.admission.errors import (
    AdmissionError,
    Denied,
    EvaluationFailure,
    Forbidden,
    InternalAuthError,
    MissingClientIdentifier,
    Unauthenticated,
)
from admission_gate.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Rejection:
    status_code: int
    body: dict[str, str]


_DENIED: dict[DecisionReason, Rejection] = {
    DecisionReason.bot: Rejection(
        HTTP_403_FORBIDDEN, {"error": "Forbidden", "message": "Automated requests are not allowed"}
    ),
    DecisionReason.shield: Rejection(
        HTTP_403_FORBIDDEN, {"error": "Forbidden", "message": "Request blocked by security policy"}
    ),
    DecisionReason.rate_limit: Rejection(
        HTTP_403_FORBIDDEN, {"error": "Forbidden", "message": "Too many requests"}
    ),
}

_MISSING_CLIENT_ID = Rejection(
    HTTP_400_BAD_REQUEST, {"error": "Bad Request", "message": "User-Agent header is required"}
)

_AUDIT_EVENTS: dict[type[AdmissionError], str] = {
    Unauthenticated: "authentication_required",
    Forbidden: "access_denied",
    MissingClientIdentifier: "missing_user_agent",
    InternalAuthError: "authentication_error",
    EvaluationFailure: "security_middleware_error",
}

_DENIED_EVENTS: dict[DecisionReason, str] = {
    DecisionReason.bot: "bot_request_blocked",
    DecisionReason.shield: "shield_blocked_request",
    DecisionReason.rate_limit: "rate_limit_exceeded",
}


def to_signal(decision: Decision) -> AdmissionError | None:
    if decision.is_allowed:
        return None
    if decision.reason is DecisionReason.missing_client_id:
        return MissingClientIdentifier()
    return Denied(decision.reason)


def translate_error(err: AdmissionError) -> Rejection:
    if isinstance(err, Unauthenticated):
        return Rejection(
            HTTP_401_UNAUTHORIZED, {"error": "Authentication required", "message": err.message}
        )
    if isinstance(err, Forbidden):
        return Rejection(
            HTTP_403_FORBIDDEN, {"error": "Access denied", "message": "Insufficient permissions"}
        )
    if isinstance(err, MissingClientIdentifier):
        return _MISSING_CLIENT_ID
    if isinstance(err, Denied) and err.reason in _DENIED:
        return _DENIED[err.reason]
    if isinstance(err, InternalAuthError):
        return Rejection(
            HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "Internal server error", "message": "Error during authentication"},
        )
    # EvaluationFailure and anything unrecognized fail closed.
    return Rejection(
        HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "Internal server error", "message": "Something went wrong with security middleware"},
    )


def translate(signal: Decision | AdmissionError) -> Rejection | None:
    if isinstance(signal, Decision):
        err = to_signal(signal)
        return None if err is None else translate_error(err)
    return translate_error(signal)


def reject(request: Request, decision: Decision) -> JSONResponse | None:
    """
    Audit-log and render a denying decision. Returns None when the decision allows.
    """

    err = to_signal(decision)
    if err is None:
        return None
    return _render(request, err, tier=decision.tier_label)


def reject_error(request: Request, exc: AdmissionError) -> JSONResponse:
    return _render(request, exc)


def _client_ip(request: Request) -> str | None:
    # The admission middleware records the address it rate limited on.
    resolved = getattr(request.state, "client_ip", None)
    if resolved is not None:
        return resolved
    return request.client.host if request.client else None


def _render(request: Request, err: AdmissionError, *, tier: str | None = None) -> JSONResponse:
    rejection = translate_error(err)
    fields: dict[str, Any] = {
        "ip": _client_ip(request),
        "user_agent": request.headers.get("user-agent"),
        "path": request.url.path,
        "method": request.method,
        "status_code": rejection.status_code,
    }
    if isinstance(err, Forbidden):
        fields.update(role=err.role, required=list(err.required))
    if tier is not None:
        fields["tier"] = tier

    if isinstance(err, Denied):
        event = _DENIED_EVENTS.get(err.reason, "request_denied")
    else:
        event = _AUDIT_EVENTS.get(type(err), "request_rejected")

    if rejection.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        log.error(event, **fields)
    else:
        log.warning(event, **fields)

    return JSONResponse(status_code=rejection.status_code, content=rejection.body)


# --- Module Notes -----------------------------------------------------------
# Route dependencies raise `AdmissionError`; the app-level exception handler calls
# `reject_error` so in-route and middleware rejections share bodies and audit fields.
