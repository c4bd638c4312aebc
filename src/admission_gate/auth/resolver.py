"""
admission_gate.auth.resolver

Session identity resolution and the role authorization gate.

Responsibilities:
- Turn a hydrated session into an `Identity` (or a typed auth failure).
- Check an `Identity` against a set of allowed roles.
- Emit audit log lines for successful resolution and refused roles.
"""

from __future__ import annotations

from collections.abc import Iterable

from admission_gate.admission.errors import Forbidden, InternalAuthError, Unauthenticated
from admission_gate.auth.models import Identity, SessionContext
from admission_gate.observability.logging import get_logger

log = get_logger(__name__)


def resolve_identity(session: SessionContext | None) -> Identity:
    if session is None or not session.user:
        raise Unauthenticated("No active session found")

    try:
        identity = Identity.from_session_user(session.user)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        # A session record we wrote ourselves is malformed: server fault, not a caller fault.
        log.error("identity_resolution_failed", session_id=session.id, exc_info=True)
        raise InternalAuthError("Error during authentication") from e

    log.info("user_authenticated", email=identity.email, role=identity.role.value)
    return identity


def require_role(identity: Identity | None, allowed: Iterable[str]) -> Identity:
    allowed_set = frozenset(str(r) for r in allowed)
    if identity is None:
        raise Unauthenticated("User not authenticated")

    if identity.role.value not in allowed_set:
        log.warning(
            "access_denied",
            email=identity.email,
            role=identity.role.value,
            required=sorted(allowed_set),
        )
        raise Forbidden(role=identity.role.value, required=sorted(allowed_set))
    return identity


# --- Module Notes -----------------------------------------------------------
# Both functions are framework-free; FastAPI wiring lives in `auth.deps`.
