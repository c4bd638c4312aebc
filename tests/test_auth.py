"""
tests.test_auth

Session identity resolver, role gate and signed session cookie.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from admission_gate.admission.errors import Forbidden, InternalAuthError, Unauthenticated
from admission_gate.auth.models import Identity, Role, SessionContext
from admission_gate.auth.resolver import require_role, resolve_identity
from admission_gate.auth.session_cookie import (
    SessionCookieConfig,
    SessionCookieError,
    read_session_id,
    sign_session_id,
)

CFG = SessionCookieConfig(
    name="sessionId", secret="s3cret", ttl=timedelta(hours=1), secure=False, samesite="lax"
)


@pytest.mark.parametrize("session", [None, SessionContext(id="abc"), SessionContext(id="abc", user={})])
def test_missing_session_or_user_is_unauthenticated(session) -> None:
    with pytest.raises(Unauthenticated) as ei:
        resolve_identity(session)
    assert ei.value.message == "No active session found"


def test_resolves_identity_from_session_user() -> None:
    session = SessionContext(id="abc", user={"id": 7, "email": "ada@example.com", "role": "admin"})
    assert resolve_identity(session) == Identity(id=7, email="ada@example.com", role=Role.admin)


def test_unknown_session_role_resolves_to_guest() -> None:
    session = SessionContext(id="abc", user={"id": 7, "email": "ada@example.com", "role": "owner"})
    assert resolve_identity(session).role is Role.guest
    assert session.role is Role.guest


def test_malformed_session_user_is_internal_error() -> None:
    with pytest.raises(InternalAuthError):
        resolve_identity(SessionContext(id="abc", user={"email": "no-id@example.com"}))


def test_role_gate() -> None:
    user = Identity(id=1, email="u@example.com", role=Role.user)

    assert require_role(user, ["user", "admin"]) is user
    with pytest.raises(Forbidden) as ei:
        require_role(user, ["admin"])
    assert (ei.value.role, ei.value.required) == ("user", ("admin",))
    with pytest.raises(Unauthenticated):
        require_role(None, ["admin"])


def test_session_cookie_verifies_signature() -> None:
    value = sign_session_id(cfg=CFG, session_id="sid-123")
    assert read_session_id(cfg=CFG, value=value) == "sid-123"
    other = SessionCookieConfig(name=CFG.name, secret="other", ttl=CFG.ttl, secure=False, samesite="lax")
    with pytest.raises(SessionCookieError):
        read_session_id(cfg=other, value=value)
    with pytest.raises(SessionCookieError):
        read_session_id(cfg=CFG, value="not-a-token")


def test_expired_session_cookie_is_rejected() -> None:
    expired = SessionCookieConfig(name="sessionId", secret="s3cret", ttl=timedelta(seconds=-5), secure=False, samesite="lax")
    value = sign_session_id(cfg=expired, session_id="sid-123")
    with pytest.raises(SessionCookieError):
        read_session_id(cfg=CFG, value=value)
