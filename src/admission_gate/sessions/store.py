"""
admission_gate.sessions.store

Session store collaborator.

Responsibilities:
- `load(session_id) -> SessionContext | None` for session hydration.
- Create/destroy sessions on sign-in/sign-out; rewrite or drop sessions when a user changes.
- Own its DB sessions so it is safe to call concurrently from middleware.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from admission_gate.auth.models import Identity, SessionContext
from admission_gate.db.repositories.sessions import SessionRepo
from admission_gate.observability.logging import get_logger

log = get_logger(__name__)


class SessionStore:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta,
    ) -> None:
        self._session_factory = session_factory
        self._ttl = ttl

    async def load(self, session_id: str) -> SessionContext | None:
        async with self._session_factory() as db:
            rec = await SessionRepo(db).get_active(session_id, now=datetime.utcnow())
        if rec is None:
            return None
        return SessionContext(id=rec.id, user=rec.user_payload)

    async def create(self, identity: Identity) -> str:
        session_id = secrets.token_urlsafe(32)
        async with self._session_factory() as db:
            await SessionRepo(db).add(
                session_id=session_id,
                user_id=identity.id,
                user_payload=identity.as_session_user(),
                expires_at=datetime.utcnow() + self._ttl,
            )
            await db.commit()
        log.info("session_created", user_id=identity.id)
        return session_id

    async def destroy(self, session_id: str) -> None:
        async with self._session_factory() as db:
            await SessionRepo(db).delete(session_id)
            await db.commit()

    async def refresh_user(self, identity: Identity) -> int:
        async with self._session_factory() as db:
            n = await SessionRepo(db).replace_user_payload(identity.id, identity.as_session_user())
            await db.commit()
        return n

    async def destroy_for_user(self, user_id: int) -> int:
        async with self._session_factory() as db:
            n = await SessionRepo(db).delete_for_user(user_id)
            await db.commit()
        if n:
            log.info("sessions_revoked", user_id=user_id, count=n)
        return n

    async def purge_expired(self) -> None:
        # Also serves as the startup connectivity check.
        async with self._session_factory() as db:
            await SessionRepo(db).purge_expired(now=datetime.utcnow())
            await db.commit()


# --- Module Notes -----------------------------------------------------------
# Sessions are never cached in-process: every request hydrates from the store so a
# sign-out or role change is visible immediately across workers.
