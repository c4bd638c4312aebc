"""
admission_gate.api.__main__

Entrypoint for running the service via `python -m admission_gate.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from admission_gate.api.app import create_app
from admission_gate.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        proxy_headers=settings.trust_forwarded_for,
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Uvicorn handles SIGTERM/SIGINT gracefully; the app lifespan disposes the DB engine.
