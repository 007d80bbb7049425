"""Runtime settings for the uplink decoder service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

LOG_LEVELS = {"CRITICAL", "FATAL", "ERROR", "WARN", "WARNING", "INFO", "DEBUG", "NOTSET"}


@dataclass
class Settings:
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"
    log_payload_warnings: bool = True
    broadcast_uplinks: bool = True


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _split_origins(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [o.strip() for o in raw.split(",") if o.strip()]


def _log_level(raw: str | None) -> str:
    level = (raw or "").strip().upper()
    if level in LOG_LEVELS:
        return level
    if level:
        logger.warning("Unknown LOG_LEVEL %r; using INFO", raw)
    return "INFO"


def load_settings() -> Settings:
    """Load settings from the environment with sensible defaults."""

    return Settings(
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "http://localhost:5173")),
        log_level=_log_level(os.getenv("LOG_LEVEL")),
        log_payload_warnings=_env_bool("LOG_PAYLOAD_WARNINGS", True),
        broadcast_uplinks=_env_bool("BROADCAST_UPLINKS", True),
    )
