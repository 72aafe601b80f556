from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from app.domain.entities.user import SessionPolicy


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str) -> tuple[str, ...]:
    value = _env(name, "") or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _bool(name: str, default: bool) -> bool:
    value = (_env(name, "") or "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    google_client_ids: tuple[str, ...]
    apple_client_ids: tuple[str, ...]
    apple_keys_url: str
    identity_provider_timeout_seconds: float
    session_ttl_days: int
    session_policy: SessionPolicy
    session_reaper_enabled: bool
    session_reaper_interval_seconds: int
    debug_routes_enabled: bool
    cors_allow_origins: tuple[str, ...]
    log_level: str


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        google_client_ids=_csv("GOOGLE_CLIENT_IDS"),
        apple_client_ids=_csv("APPLE_CLIENT_IDS"),
        apple_keys_url=_env("APPLE_KEYS_URL", "https://appleid.apple.com/auth/keys"),
        identity_provider_timeout_seconds=float(_env("IDENTITY_PROVIDER_TIMEOUT_SECONDS", "5")),
        session_ttl_days=int(_env("SESSION_TTL_DAYS", "7")),
        session_policy=SessionPolicy((_env("SESSION_POLICY", "multi") or "multi").strip().lower()),
        session_reaper_enabled=_bool("SESSION_REAPER_ENABLED", True),
        session_reaper_interval_seconds=int(_env("SESSION_REAPER_INTERVAL_SECONDS", "3600")),
        debug_routes_enabled=_bool("DEBUG_ROUTES_ENABLED", False),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS") or ("*",),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
