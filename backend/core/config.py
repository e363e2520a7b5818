"""Environment driven settings for the API process."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r", name, raw)
        return default


@dataclass(slots=True)
class Settings:
    agent_service_url: str | None = None
    agent_service_timeout: float = 60.0
    data_processor_url: str | None = None
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        return cls(
            agent_service_url=os.getenv("AGENT_SERVICE_URL") or None,
            agent_service_timeout=_float_env("AGENT_SERVICE_TIMEOUT", 60.0),
            data_processor_url=os.getenv("DATA_PROCESSOR_URL") or None,
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
