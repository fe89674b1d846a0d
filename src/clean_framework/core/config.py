"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class DebounceConfig(BaseModel):
    duration_seconds: float = Field(default=0.3, gt=0)


class TransportConfig(BaseModel):
    # None disables the timeout; watcher handlers then run until disposed
    handler_timeout_seconds: float | None = None


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


class DemoConfig(BaseModel):
    ticks: int = Field(default=4, ge=0)
    tick_interval_seconds: float = Field(default=0.1, gt=0)
    greeting_delay_seconds: float = Field(default=0.1, ge=0)


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    debounce: DebounceConfig = Field(default_factory=DebounceConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)

    model_config = {"env_prefix": "CLEAN_FRAMEWORK_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
