"""
Application settings.

Defaults cover local use. A YAML file named by the ROSTER_CONFIG
environment variable overrides any of them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from roster.models import Squad

CONFIG_ENV_VAR = "ROSTER_CONFIG"

DEFAULT_SAMPLE_DATA_PATH = Path(__file__).parent.parent / "sample_data.json"


class AdminAccount(BaseModel):
    password: str
    squad: Squad


def _default_admins() -> dict[str, AdminAccount]:
    return {
        f"admin{n}": AdminAccount(password=f"admin{n}", squad=squad)
        for n, squad in enumerate(Squad, start=1)
    }


class Settings(BaseModel):
    log_level: str = "INFO"
    load_sample_data: bool = True
    sample_data_path: Path = DEFAULT_SAMPLE_DATA_PATH
    admins: dict[str, AdminAccount] = Field(default_factory=_default_admins)


_settings: Settings | None = None


def load_settings(path: str | Path | None = None) -> Settings:
    """Read settings from a YAML file, falling back to defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return Settings()

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return Settings(**data)


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def configure_logging(settings: Settings | None = None) -> None:
    if settings is None:
        settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
