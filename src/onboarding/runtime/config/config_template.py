"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.onboarding.core.exceptions import ConfigurationError
from src.onboarding.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ConfigurationError(
                    f"Required environment variable {var_name}: {error_msg}"
                )
            return value

        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ConfigurationError(
                    f"Required environment variable {var_name} not set"
                )
            return value

    # Match ${...} patterns
    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_FOO`` variables to ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    env_variables = [
        (var, value) for var, value in os.environ.items() if var.startswith(prefix)
    ]
    if env_variables:
        logger.info(
            "Applying environment-specific overrides: {}",
            [name for name, _ in env_variables],
        )

    for var_name, var_value in env_variables:
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        logger.debug(f"Set environment variable {new_var_name} from {var_name}")


def load_templated_yaml(file_path: Path, env_mode: str | None = None) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Environment name used for prefixed overrides. Defaults to
            the APP_ENVIRONMENT variable.

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is missing, required environment
            variables are missing, or the result fails validation
    """
    try:
        with open(file_path) as f:
            content = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {file_path}") from e

    env_mode = env_mode or os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")
    apply_environment_overrides(env_mode)

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ConfigurationError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML: {e}") from e

    try:
        config = ConfigData(**loaded.get("config", {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    missing = config.missing_required()
    if missing:
        raise ConfigurationError(
            f"Missing required configuration values: {', '.join(missing)}"
        )

    return config
