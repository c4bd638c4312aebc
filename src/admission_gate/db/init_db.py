"""
admission_gate.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create the users/sessions tables for local development and tests.
- Keep production migration workflow separate (Alembic).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from admission_gate.db import models  # noqa: F401  # register models on Base.metadata
from admission_gate.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# --- Module Notes -----------------------------------------------------------
# Production deployments run Alembic migrations instead (see `alembic/env.py`).
