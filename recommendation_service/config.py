"""
Service configuration loaded from configs/config.yaml with env overrides.

The YAML file is validated into pydantic models at startup so a bad value
fails fast instead of surfacing on the first request.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "config.yaml"
CONFIG_ENV_VAR = "RECOMMENDATION_SERVICE_CONFIG"


class DatabaseConfig(BaseModel):
    url: str = Field(default="sqlite:///./outputs/recommendations.db", description="SQLAlchemy URL")


class WindowConfig(BaseModel):
    """Bucket windows, measured as exact elapsed durations."""

    recent_days: int = Field(default=7, ge=0)
    monthly_days: int = Field(default=30, ge=0)
    default_recent_days: int = Field(default=7, ge=0, description="Default for /recent?days=")
    default_type_recent_hours: int = Field(default=24, ge=0, description="Default for /type/{t}/recent?hours=")

    @model_validator(mode="after")
    def _monthly_covers_recent(self) -> "WindowConfig":
        if self.monthly_days < self.recent_days:
            raise ValueError("monthly_days must be >= recent_days")
        return self


class APIConfig(BaseModel):
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    windows: WindowConfig = Field(default_factory=WindowConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    """Read and validate the YAML config, then apply env overrides.

    An explicit path (argument or RECOMMENDATION_SERVICE_CONFIG) must exist.
    When neither is given and the bundled configs/config.yaml is absent,
    built-in defaults are used.
    """
    explicit = path or os.getenv(CONFIG_ENV_VAR)
    cfg_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    raw: dict = {}
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"{cfg_path} not found")

    db_url = os.getenv("DATABASE_URL")
    if db_url:
        raw.setdefault("database", {})["url"] = db_url

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        raw.setdefault("logging", {})["level"] = log_level.strip().upper()

    return AppConfig.model_validate(raw)


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config()
