"""
admission_gate.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for DB sessions, the session store and cookie config.
- Encapsulate app.state access patterns (sessionmaker, session store, cookie config).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from admission_gate.auth.session_cookie import SessionCookieConfig
from admission_gate.sessions.store import SessionStore


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def session_store(request: Request) -> SessionStore:
    return request.app.state.session_store  # type: ignore[attr-defined]


def cookie_cfg(request: Request) -> SessionCookieConfig:
    return request.app.state.cookie_cfg  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Routers commit explicitly.
    async with session_factory() as session:
        yield session


# --- Module Notes -----------------------------------------------------------
# All of these objects are created in `api.app.create_app` / its lifespan.
