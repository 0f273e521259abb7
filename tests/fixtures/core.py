from __future__ import annotations

import pytest

from src.onboarding.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    IdentityProviderConfig,
    ResourceServiceConfig,
    TokenConfig,
)
from tests.fixtures.dummies import FakeClock

_SIGNING_SECRET = "test-signing-secret-0123456789abcdef"
_KEYCLOAK_URL = "https://idp.test"
_RESOURCE_URL = "https://resources.test/api/v1"

__all__ = [
    "signing_secret",
    "fake_clock",
    "test_config",
    "keycloak_config",
    "resource_service_config",
]


@pytest.fixture
def signing_secret() -> str:
    return _SIGNING_SECRET


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_config(signing_secret) -> ConfigData:
    """Configuration wired to the in-memory backends."""
    return ConfigData(
        app=AppConfig(environment="test"),
        identity_provider=IdentityProviderConfig(backend="memory"),
        resource_service=ResourceServiceConfig(backend="memory"),
        token=TokenConfig(signing_secret=signing_secret, ttl_seconds=3600),
    )


@pytest.fixture
def keycloak_config() -> IdentityProviderConfig:
    return IdentityProviderConfig(
        base_url=_KEYCLOAK_URL,
        realm="onboarding",
        client_id="onboarding-login",
        admin_client_id="onboarding-admin",
        admin_client_secret="admin-secret",
    )


@pytest.fixture
def resource_service_config() -> ResourceServiceConfig:
    return ResourceServiceConfig(base_url=_RESOURCE_URL)
