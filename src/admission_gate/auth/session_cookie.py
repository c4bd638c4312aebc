"""
admission_gate.auth.session_cookie

Signed session-cookie helpers.

Responsibilities:
- Sign a server-side session id into a tamper-evident cookie value (HS256 JWT).
- Verify a cookie value and extract the session id.
- Build the cookie attributes (HttpOnly, Secure, SameSite) from settings.

Note:
- The cookie carries only the session id; identity lives in the server-side session record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from starlette.responses import Response

from admission_gate.settings import Settings

_ALG = "HS256"
_ISSUER = "admission-gate"


@dataclass(frozen=True, slots=True)
class SessionCookieConfig:
    name: str
    secret: str
    ttl: timedelta
    secure: bool
    samesite: str

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionCookieConfig:
        return cls(
            name=settings.session_cookie_name,
            secret=settings.session_secret,
            ttl=timedelta(seconds=settings.session_ttl_seconds),
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


class SessionCookieError(Exception):
    pass


def sign_session_id(*, cfg: SessionCookieConfig, session_id: str) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": _ISSUER,
        "sid": session_id,
        "iat": int(now.timestamp()),
        "exp": int((now + cfg.ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=_ALG)


def read_session_id(*, cfg: SessionCookieConfig, value: str) -> str:
    try:
        payload = jwt.decode(
            value,
            cfg.secret,
            algorithms=[_ALG],
            issuer=_ISSUER,
            options={"require": ["exp", "iat", "iss", "sid"]},
        )
    except InvalidTokenError as e:
        raise SessionCookieError(str(e)) from e
    sid = payload["sid"]
    if not isinstance(sid, str) or not sid:
        raise SessionCookieError("invalid session id claim")
    return sid


def set_session_cookie(response: Response, *, cfg: SessionCookieConfig, session_id: str) -> None:
    response.set_cookie(
        key=cfg.name,
        value=sign_session_id(cfg=cfg, session_id=session_id),
        max_age=int(cfg.ttl.total_seconds()),
        httponly=True,
        secure=cfg.secure,
        samesite=cfg.samesite,  # type: ignore[arg-type]
    )


def clear_session_cookie(response: Response, *, cfg: SessionCookieConfig) -> None:
    response.delete_cookie(
        key=cfg.name,
        httponly=True,
        secure=cfg.secure,
        samesite=cfg.samesite,  # type: ignore[arg-type]
    )


# --- Module Notes -----------------------------------------------------------
# Cookie expiry and session-record expiry use the same TTL; the store re-checks
# `expires_at` so a revoked/expired record is absent even if the cookie still verifies.
