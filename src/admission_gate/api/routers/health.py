"""
admission_gate.api.routers.health

Liveness endpoint.

Responsibilities:
- `GET /health` for monitoring systems; the admission middleware lets it through untouched.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    # Liveness only: no DB round trip, so a slow database never fails the probe.
    return {
        "status": "OK",
        "timestamp": datetime.now(tz=UTC).isoformat().replace("+00:00", "Z"),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


# --- Module Notes -----------------------------------------------------------
# If `GATE_HEALTH_PATH` is changed, mount this router at the same path or the bypass
# no longer applies to it.
