"""Application settings, read from the environment."""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
import os


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    forced_pass_delay: float = 1.0  # seconds a dead roll stays on screen
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def debug(self) -> bool:
        return self.env == "development"


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        env=os.getenv("LUDOLIVE_ENV", "development"),
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS", "*")),
        forced_pass_delay=float(os.getenv("LUDOLIVE_FORCED_PASS_DELAY", "1.0")),
        log_level=os.getenv("LUDOLIVE_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("LUDOLIVE_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


@lru_cache
def get_config() -> Settings:
    return load_settings()
