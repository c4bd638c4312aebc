"""
admission_gate.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Create, look up, list, update and delete user accounts.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from admission_gate.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, email: str, name: str, password_hash: str, role: str) -> User:
        user = User(email=email, name=name, password_hash=password_hash, role=role)
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self, *, limit: int = 200) -> list[User]:
        stmt = select(User).order_by(desc(User.created_at), desc(User.id)).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        await self._session.flush()
        return user

    async def delete(self, user: User) -> None:
        await self._session.delete(user)
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Email uniqueness is enforced by the DB index; routers check first for a clean 409.
