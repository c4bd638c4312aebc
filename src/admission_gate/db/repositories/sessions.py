"""
admission_gate.db.repositories.sessions

Repository for server-side `SessionRecord` entities.

Responsibilities:
- Insert, fetch (unexpired only), rewrite and delete session records.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from admission_gate.db.models import SessionRecord


class SessionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        session_id: str,
        user_id: int | None,
        user_payload: dict[str, Any] | None,
        expires_at: datetime,
    ) -> SessionRecord:
        rec = SessionRecord(
            id=session_id, user_id=user_id, user_payload=user_payload, expires_at=expires_at
        )
        self._session.add(rec)
        await self._session.flush()
        return rec

    async def get_active(self, session_id: str, *, now: datetime) -> SessionRecord | None:
        stmt = select(SessionRecord).where(
            SessionRecord.id == session_id, SessionRecord.expires_at > now
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete(self, session_id: str) -> None:
        await self._session.execute(delete(SessionRecord).where(SessionRecord.id == session_id))

    async def delete_for_user(self, user_id: int) -> int:
        res = await self._session.execute(
            delete(SessionRecord).where(SessionRecord.user_id == user_id)
        )
        return res.rowcount or 0

    async def replace_user_payload(self, user_id: int, payload: dict[str, Any]) -> int:
        res = await self._session.execute(
            update(SessionRecord).where(SessionRecord.user_id == user_id).values(user_payload=payload)
        )
        return res.rowcount or 0

    async def purge_expired(self, *, now: datetime) -> None:
        await self._session.execute(delete(SessionRecord).where(SessionRecord.expires_at <= now))


# --- Module Notes -----------------------------------------------------------
# Expiry is enforced at read time (`get_active`); `purge_expired` only reclaims space.
