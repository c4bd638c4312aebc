"""
admission_gate.api.routers.users

Role-gated user management endpoints.

Responsibilities:
- List users (admin), read/update a user (self or admin), delete a user (admin).
- Keep live sessions consistent with role changes and deletions.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from admission_gate.admission.errors import Forbidden
from admission_gate.api.deps import db_session, session_store
from admission_gate.auth.deps import current_identity, require_roles
from admission_gate.auth.models import Identity, Role
from admission_gate.auth.passwords import hash_password
from admission_gate.db.models import User
from admission_gate.db.repositories.users import UserRepo
from admission_gate.observability.logging import get_logger
from admission_gate.sessions.store import SessionStore

router = APIRouter(prefix="/api/users", tags=["users"])
log = get_logger(__name__)


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str
    created_at: datetime
    updated_at: datetime


class UserUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=255)
    email: str | None = Field(default=None, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$", max_length=255)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    role: Role | None = None


def _out(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _ensure_self_or_admin(identity: Identity, user_id: int) -> None:
    if identity.id != user_id and not identity.is_admin:
        raise Forbidden(role=identity.role.value, required=[Role.admin.value])


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: Identity = Depends(require_roles(Role.admin)),
    session: AsyncSession = Depends(db_session),
) -> list[UserResponse]:
    return [_out(u) for u in await UserRepo(session).list_all()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    identity: Identity = Depends(current_identity),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    _ensure_self_or_admin(identity, user_id)
    user = await UserRepo(session).get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return _out(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    identity: Identity = Depends(current_identity),
    session: AsyncSession = Depends(db_session),
    store: SessionStore = Depends(session_store),
) -> UserResponse:
    _ensure_self_or_admin(identity, user_id)
    if body.role is not None and not identity.is_admin:
        # Only admins may change roles, including their own.
        raise Forbidden(role=identity.role.value, required=[Role.admin.value])

    users = UserRepo(session)
    user = await users.get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    if body.email and body.email != user.email and await users.get_by_email(body.email):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Email already exists")

    changes = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"password"})
    if "role" in changes:
        changes["role"] = Role(changes["role"]).value
    if body.password:
        changes["password_hash"] = hash_password(body.password)
    user = await users.update(user, changes)
    await session.commit()

    # Role/email live in session snapshots; push the new values so tiers follow immediately.
    await store.refresh_user(Identity(id=user.id, email=user.email, role=Role.parse(user.role)))
    log.info("user_updated", user_id=user.id, by=identity.email, fields=sorted(changes))
    return _out(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    identity: Identity = Depends(require_roles(Role.admin)),
    session: AsyncSession = Depends(db_session),
    store: SessionStore = Depends(session_store),
) -> dict[str, object]:
    users = UserRepo(session)
    user = await users.get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    email = user.email
    await users.delete(user)
    await session.commit()
    await store.destroy_for_user(user_id)
    log.info("user_deleted", user_id=user_id, by=identity.email)
    return {"message": "User deleted successfully", "user": {"id": user_id, "email": email}}


# --- Module Notes -----------------------------------------------------------
# List/delete need admin; read/update accept the user themself or an admin.
