"""
admission_gate.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata (including the client address) into structlog contextvars.
- Emit one completion line per request with status, latency and the admission outcome.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from admission_gate.observability.logging import get_logger

log = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Ensures every request has a request id
    - Binds request-scoped contextvars for structured logs
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
            client_ip=request.client.host if request.client else None,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **_admission_fields(request),
            )
        finally:
            # Avoid leaking context across requests under async concurrency.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


def _admission_fields(request: Request) -> dict[str, Any]:
    # Filled in by the admission middleware and `auth.deps.current_identity`.
    fields: dict[str, Any] = {}
    decision = getattr(request.state, "decision", None)
    if decision is not None:
        fields["tier"] = decision.tier_label
        fields["verdict"] = decision.verdict.value
    identity = getattr(request.state, "identity", None)
    if identity is not None:
        fields["user_id"] = identity.id
        fields["role"] = identity.role.value
    return fields


# --- Module Notes -----------------------------------------------------------
# This middleware wraps `admission.middleware.AdmissionMiddleware`, so rejection
# audit lines carry the same request id as the completion line.
