"""
admission_gate.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert the session hydrated by the admission middleware into a typed `Identity`.
- Enforce RBAC via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, Request

from admission_gate.auth.models import Identity, SessionContext
from admission_gate.auth.resolver import require_role, resolve_identity


def current_session(request: Request) -> SessionContext | None:
    # Set by `admission.middleware.AdmissionMiddleware`; absent means anonymous.
    return getattr(request.state, "session", None)


def current_identity(
    request: Request,
    session: SessionContext | None = Depends(current_session),
) -> Identity:
    identity = resolve_identity(session)
    request.state.identity = identity
    return identity


def require_roles(*allowed: str):
    allowed_set = frozenset(allowed)

    def _dep(identity: Identity = Depends(current_identity)) -> Identity:
        return require_role(identity, allowed_set)

    return _dep


# --- Module Notes -----------------------------------------------------------
# Auth failures are raised as `AdmissionError` subclasses and rendered by the app's
# exception handler through `admission.translator.reject_error`.
