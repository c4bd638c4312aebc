"""
admission_gate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., session secret).
- Derive environment-dependent security flags (detection mode, cookie attributes).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="GATE_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and cookie security.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "admission-gate"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Persistence (users + server-side sessions)
    database_url: str = "sqlite+aiosqlite:///./gate.db"

    # Sessions
    session_secret: str = Field(default="dev-session-secret-change-me", repr=False)
    session_cookie_name: str = "sessionId"
    session_ttl_seconds: int = 24 * 60 * 60

    # CORS
    cors_origin: str = "http://localhost:3001"

    # Threat detection
    detection_live_enabled: bool = False
    # LIVE: the sliding-window rule always enforces. INHERIT: it follows `detection_mode`.
    rate_limit_mode: Literal["LIVE", "INHERIT"] = "LIVE"
    trust_forwarded_for: bool = False

    # Per-deployment rate-limit thresholds
    admin_rate_limit: int = Field(default=20, ge=1)
    user_rate_limit: int = Field(default=10, ge=1)
    guest_rate_limit: int = Field(default=5, ge=1)
    rate_limit_window_seconds: int = Field(default=60, ge=1)

    # Liveness path; bypasses the admission chain entirely.
    health_path: str = "/health"

    @property
    def detection_mode(self) -> Literal["LIVE", "DRY_RUN"]:
        # Enforce only in production with an explicit opt-in; elsewhere client IPs are often
        # unreliable (no reverse proxy), so rules observe without blocking.
        if self.env == "prod" and self.detection_live_enabled:
            return "LIVE"
        return "DRY_RUN"

    @property
    def cookie_secure(self) -> bool:
        return self.env == "prod"

    @property
    def cookie_samesite(self) -> Literal["lax", "none"]:
        # Production frontends live on another origin; browsers require Secure with SameSite=None.
        return "none" if self.env == "prod" else "lax"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Rate-limit thresholds are read once when the app is built (see
# `admission.tiers.RolePolicyTable.from_settings`); changing env vars requires a restart.
