"""Unit tests for config.yaml loading and environment substitution."""

from pathlib import Path

import pytest

from src.onboarding.core.exceptions import ConfigurationError
from src.onboarding.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)
from src.onboarding.runtime.settings import EnvironmentVariables, load_config

MINIMAL_YAML = """
config:
  identity_provider:
    backend: memory
  resource_service:
    backend: memory
  token:
    signing_secret: "${ONB_TOKEN_SECRET}"
    ttl_seconds: ${ONB_TOKEN_TTL:-900}
"""

KEYCLOAK_YAML = """
config:
  identity_provider:
    base_url: "https://idp.test/"
    realm: onboarding
    client_id: login
    admin_client_id: admin
  resource_service:
    base_url: "https://resources.test"
  token:
    signing_secret: s3cret
"""


@pytest.fixture
def write_config(tmp_path):
    def _write(content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path

    return _write


class TestSubstitution:
    def test_required_variable(self, monkeypatch):
        monkeypatch.setenv("SUB_VALUE", "x")
        assert substitute_env_vars("a=${SUB_VALUE}") == "a=x"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("SUB_MISSING", raising=False)
        assert substitute_env_vars("${SUB_MISSING:-fallback}") == "fallback"

    def test_missing_required_variable(self, monkeypatch):
        monkeypatch.delenv("SUB_MISSING", raising=False)
        with pytest.raises(ConfigurationError, match="SUB_MISSING"):
            substitute_env_vars("${SUB_MISSING}")

    def test_custom_error_message(self, monkeypatch):
        monkeypatch.delenv("SUB_MISSING", raising=False)
        with pytest.raises(ConfigurationError, match="set it please"):
            substitute_env_vars("${SUB_MISSING:?set it please}")


class TestLoadTemplatedYaml:
    def test_loads_and_substitutes(self, write_config, monkeypatch):
        monkeypatch.setenv("ONB_TOKEN_SECRET", "from-env")
        monkeypatch.delenv("ONB_TOKEN_TTL", raising=False)

        config = load_templated_yaml(write_config(MINIMAL_YAML), env_mode="test")

        assert config.token.signing_secret == "from-env"
        assert config.token.ttl_seconds == 900
        assert config.identity_provider.backend == "memory"
        assert config.auth.allow_trusted_callers is True

    def test_environment_prefixed_override(self, write_config, monkeypatch):
        monkeypatch.setenv("ONB_TOKEN_SECRET", "base")
        monkeypatch.setenv("STAGING_ONB_TOKEN_SECRET", "staging")

        config = load_templated_yaml(write_config(MINIMAL_YAML), env_mode="staging")

        assert config.token.signing_secret == "staging"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_templated_yaml(tmp_path / "absent.yaml", env_mode="test")

    def test_missing_variable_is_fatal(self, write_config, monkeypatch):
        monkeypatch.delenv("ONB_TOKEN_SECRET", raising=False)
        with pytest.raises(ConfigurationError, match="ONB_TOKEN_SECRET"):
            load_templated_yaml(write_config(MINIMAL_YAML), env_mode="test")

    def test_invalid_value(self, write_config, monkeypatch):
        monkeypatch.setenv("ONB_TOKEN_SECRET", "x")
        monkeypatch.setenv("ONB_TOKEN_TTL", "0")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_templated_yaml(write_config(MINIMAL_YAML), env_mode="test")

    def test_missing_required_settings_are_listed(self, write_config):
        with pytest.raises(ConfigurationError) as exc_info:
            load_templated_yaml(
                write_config("config:\n  token:\n    algorithm: HS256\n"), env_mode="test"
            )

        message = exc_info.value.message
        assert "token.signing_secret" in message
        assert "identity_provider.realm" in message
        assert "resource_service.base_url" in message

    def test_keycloak_settings(self, write_config):
        config = load_templated_yaml(write_config(KEYCLOAK_YAML), env_mode="test")

        assert config.identity_provider.base_url == "https://idp.test"
        assert config.identity_provider.timeout == 10.0
        assert config.resource_service.resources_path == "/resources"


class TestLoadConfig:
    def test_environment_and_log_level_applied(self, write_config, monkeypatch):
        monkeypatch.setenv("ONB_TOKEN_SECRET", "x")
        monkeypatch.setenv("APP_ENVIRONMENT", "production")
        monkeypatch.setenv("CONFIG_PATH", str(write_config(MINIMAL_YAML)))
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = load_config(EnvironmentVariables(_env_file=None))

        assert config.app.environment == "production"
        assert config.logging.level == "DEBUG"

    def test_repository_config_file_loads(self, monkeypatch):
        monkeypatch.setenv("TOKEN_SECRET", "repo-secret")
        repo_config = Path(__file__).resolve().parents[3] / "config.yaml"

        config = load_templated_yaml(repo_config, env_mode="test")

        assert config.token.signing_secret == "repo-secret"
        assert config.identity_provider.link_attribute == "resource_id"
