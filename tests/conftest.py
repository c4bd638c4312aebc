"""
tests.conftest

Shared fixtures for admission tests.

Responsibilities:
- Build an app per test against a throwaway SQLite file, with the lifespan entered explicitly.
- Provide an httpx client that talks to the app in-process with a browser User-Agent.
- Seed users/sessions directly (so seeding does not consume rate-limit quota).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from admission_gate.admission.decision import RawDecision
from admission_gate.admission.rules import RuleSet
from admission_gate.api.app import create_app
from admission_gate.auth.models import Identity, Role
from admission_gate.auth.passwords import hash_password
from admission_gate.auth.session_cookie import sign_session_id
from admission_gate.db.repositories.users import UserRepo
from admission_gate.detection.protocol import RequestSnapshot
from admission_gate.settings import Settings

BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"


class StubDetector:
    """Stateless detector returning canned results (or raising)."""

    def __init__(self, results=(), exc: Exception | None = None) -> None:
        self.results = tuple(results)
        self.exc = exc
        self.calls: list[tuple[RequestSnapshot, RuleSet]] = []

    async def evaluate(self, snapshot: RequestSnapshot, rule_set: RuleSet) -> RawDecision:
        self.calls.append((snapshot, rule_set))
        if self.exc is not None:
            raise self.exc
        return RawDecision(results=self.results)


class LogRecorder:
    """Stands in for a module-level structlog logger and keeps every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def _record(self, event: str, **fields) -> None:
        self.events.append((event, fields))

    debug = info = warning = error = _record

    def named(self, event: str) -> list[dict]:
        return [fields for name, fields in self.events if name == event]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'gate.db'}",
        session_secret="test-secret",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; do it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test", headers={"User-Agent": BROWSER_UA}
    ) as c:
        yield c


async def seed_session(app: FastAPI, *, email: str, role: str, password: str = "secret-pass") -> str:
    """
    Create a user plus a live session and return a `Cookie` header value for it.
    """

    async with app.state.sessionmaker() as db:
        user = await UserRepo(db).create(
            email=email, name="Test User", password_hash=hash_password(password), role=role
        )
        await db.commit()
    session_id = await app.state.session_store.create(
        Identity(id=user.id, email=user.email, role=Role.parse(role))
    )
    value = sign_session_id(cfg=app.state.cookie_cfg, session_id=session_id)
    return f"{app.state.cookie_cfg.name}={value}"


# --- Module Notes -----------------------------------------------------------
# Every test gets a fresh app, hence a fresh in-memory rate-limit storage.
