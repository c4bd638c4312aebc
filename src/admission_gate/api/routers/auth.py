"""
admission_gate.api.routers.auth

Session authentication endpoints.

Responsibilities:
- Sign up (create account + session), sign in (verify password + session), sign out.
- Issue and clear the signed, HTTP-only session cookie.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_401_UNAUTHORIZED, HTTP_409_CONFLICT

from admission_gate.api.deps import cookie_cfg, db_session, session_store
from admission_gate.auth.deps import current_session
from admission_gate.auth.models import Identity, Role, SessionContext
from admission_gate.auth.passwords import hash_password, verify_password
from admission_gate.auth.session_cookie import (
    SessionCookieConfig,
    clear_session_cookie,
    set_session_cookie,
)
from admission_gate.db.repositories.users import UserRepo
from admission_gate.observability.logging import get_logger
from admission_gate.sessions.store import SessionStore

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = get_logger(__name__)

_EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class SignUpRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=128)


class SignInRequest(BaseModel):
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    message: str
    user: UserOut


@router.post("/sign-up", response_model=AuthResponse, status_code=HTTP_201_CREATED)
async def sign_up(
    body: SignUpRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    store: SessionStore = Depends(session_store),
    cfg: SessionCookieConfig = Depends(cookie_cfg),
) -> AuthResponse:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="User with this email already exists")

    user = await users.create(
        email=body.email,
        name=body.name,
        password_hash=hash_password(body.password),
        role=Role.user.value,
    )
    await session.commit()

    identity = Identity(id=user.id, email=user.email, role=Role.parse(user.role))
    set_session_cookie(response, cfg=cfg, session_id=await store.create(identity))
    log.info("user_registered", email=user.email, role=user.role)
    return AuthResponse(
        message="User registered",
        user=UserOut(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    body: SignInRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    store: SessionStore = Depends(session_store),
    cfg: SessionCookieConfig = Depends(cookie_cfg),
) -> AuthResponse:
    user = await UserRepo(session).get_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        log.warning("sign_in_failed", email=body.email)
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    identity = Identity(id=user.id, email=user.email, role=Role.parse(user.role))
    set_session_cookie(response, cfg=cfg, session_id=await store.create(identity))
    log.info("user_signed_in", email=user.email)
    return AuthResponse(
        message="User signed in successfully",
        user=UserOut(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.post("/sign-out")
async def sign_out(
    response: Response,
    current: SessionContext | None = Depends(current_session),
    store: SessionStore = Depends(session_store),
    cfg: SessionCookieConfig = Depends(cookie_cfg),
) -> dict[str, str]:
    if current is not None:
        await store.destroy(current.id)
    clear_session_cookie(response, cfg=cfg)
    return {"message": "User signed out successfully"}


# --- Module Notes -----------------------------------------------------------
# Sign-in always starts a fresh session id; the previous cookie (if any) simply stops
# matching a record once it expires or the user signs out.
