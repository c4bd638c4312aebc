"""
admission_gate.api.routers.index

Landing endpoints (behind the admission chain).
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from admission_gate.observability.logging import get_logger

router = APIRouter(tags=["index"])
log = get_logger(__name__)


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    log.info("hello")
    return "Hello from Admission Gate!"


@router.get("/api")
async def api_banner() -> dict[str, str]:
    return {"message": "Admission Gate API is running!"}
