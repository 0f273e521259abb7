"""Process-level settings read from the environment and .env files.

These are the few primitive values needed before config.yaml can be located
and parsed. Everything else lives in ConfigData.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.onboarding.runtime.config.config_data import ConfigData
from src.onboarding.runtime.config.config_template import load_templated_yaml


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", validation_alias="APP_ENVIRONMENT"
    )
    config_path: Path = Field(
        default=Path("config.yaml"), validation_alias="CONFIG_PATH"
    )
    log_level: str | None = Field(default=None, validation_alias="LOG_LEVEL")


def load_config(env: EnvironmentVariables | None = None) -> ConfigData:
    """Build the process configuration once at startup.

    Raises:
        ConfigurationError: If the configuration is missing or incomplete.
    """
    env = env or EnvironmentVariables()
    config = load_templated_yaml(env.config_path, env_mode=env.environment)
    config.app.environment = env.environment
    if env.log_level:
        config.logging.level = env.log_level
    return config
