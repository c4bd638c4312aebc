"""
admission_gate.admission.middleware

Admission middleware chain.

Responsibilities:
- Let the liveness path through untouched.
- Hydrate the server-side session from the signed cookie (best effort).
- Run the security evaluator with the caller's role and short-circuit on rejection.
- Record the session, client address and decision on `request.state` for routes,
  rejection audit lines and the request completion log.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from admission_gate.admission.errors import EvaluationFailure, InternalAuthError
from admission_gate.admission.evaluator import SecurityEvaluator
from admission_gate.admission.translator import reject, reject_error
from admission_gate.auth.models import Role, SessionContext
from admission_gate.auth.session_cookie import (
    SessionCookieConfig,
    SessionCookieError,
    read_session_id,
)
from admission_gate.detection.protocol import RequestSnapshot
from admission_gate.observability.logging import get_logger
from admission_gate.sessions.store import SessionStore

log = get_logger(__name__)


class AdmissionMiddleware(BaseHTTPMiddleware):
    """
    START -> health bypass? -> session hydration -> security evaluation -> dispatch | reject
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        health_path: str = "/health",
        trust_forwarded_for: bool = False,
    ) -> None:
        super().__init__(app)
        self._health_path = health_path
        self._trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next) -> Response:
        # Monitoring must never be rate limited or asked for a session.
        if request.url.path == self._health_path:
            return await call_next(request)

        snapshot = RequestSnapshot.from_request(
            request, trust_forwarded_for=self._trust_forwarded_for
        )
        request.state.client_ip = snapshot.client_ip

        state = request.app.state
        try:
            session = await hydrate_session(
                request, store=state.session_store, cookie_cfg=state.cookie_cfg
            )
            role = session_role(session)
        except InternalAuthError as e:
            return reject_error(request, e)
        request.state.session = session

        evaluator: SecurityEvaluator = state.evaluator
        try:
            decision = await evaluator.evaluate(snapshot, role)
        except EvaluationFailure as e:
            return reject_error(request, e)
        request.state.decision = decision

        rejection = reject(request, decision)
        if rejection is not None:
            return rejection
        return await call_next(request)


async def hydrate_session(
    request: Request, *, store: SessionStore, cookie_cfg: SessionCookieConfig
) -> SessionContext | None:
    raw = request.cookies.get(cookie_cfg.name)
    if not raw:
        return None

    try:
        session_id = read_session_id(cfg=cookie_cfg, value=raw)
    except SessionCookieError as e:
        # Tampered or expired cookie: treat as anonymous, do not fail the request.
        log.info("session_cookie_rejected", reason=str(e))
        return None

    try:
        return await store.load(session_id)
    except Exception as e:
        log.error("session_load_failed", exc_info=True)
        raise InternalAuthError("session store unavailable") from e


def session_role(session: SessionContext | None) -> Role | None:
    if session is None:
        return None
    try:
        return session.role
    except Exception as e:
        log.error("session_role_unreadable", session_id=session.id, exc_info=True)
        raise InternalAuthError("malformed session record") from e


# --- Module Notes -----------------------------------------------------------
# Role gating is not done here: a missing session only halts the request at routes
# that depend on `auth.deps.current_identity` / `require_roles`.
