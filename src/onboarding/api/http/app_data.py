from dataclasses import dataclass

from src.onboarding.core.ports import IdentityProviderPort, ResourceServicePort
from src.onboarding.core.services import (
    AuthOrchestrator,
    HttpResourceService,
    InMemoryIdentityProvider,
    InMemoryResourceService,
    KeycloakIdentityProvider,
    SignupOrchestrator,
    TokenCodec,
)
from src.onboarding.runtime.config.config_data import ConfigData


@dataclass(frozen=True)
class ApplicationDependencies:
    config: ConfigData
    identity_provider: IdentityProviderPort
    resource_service: ResourceServicePort
    token_codec: TokenCodec
    signup_orchestrator: SignupOrchestrator
    auth_orchestrator: AuthOrchestrator


def build_identity_provider(config: ConfigData) -> IdentityProviderPort:
    if config.identity_provider.backend == "memory":
        return InMemoryIdentityProvider()
    return KeycloakIdentityProvider(config.identity_provider)


def build_resource_service(config: ConfigData) -> ResourceServicePort:
    if config.resource_service.backend == "memory":
        return InMemoryResourceService()
    return HttpResourceService(config.resource_service)


def build_dependencies(
    config: ConfigData,
    identity_provider: IdentityProviderPort | None = None,
    resource_service: ResourceServicePort | None = None,
    token_codec: TokenCodec | None = None,
) -> ApplicationDependencies:
    """Wire ports, codec and orchestrators from one configuration object."""
    identity_provider = identity_provider or build_identity_provider(config)
    resource_service = resource_service or build_resource_service(config)
    token_codec = token_codec or TokenCodec.from_config(config.token)
    idp_config = config.identity_provider

    signup_orchestrator = SignupOrchestrator(
        identity_provider,
        resource_service,
        natural_key_attribute=idp_config.natural_key_attribute,
        link_attribute=idp_config.link_attribute,
    )
    auth_orchestrator = AuthOrchestrator(
        identity_provider,
        resource_service,
        token_codec,
        token_ttl=config.token.ttl_seconds,
        link_attribute=idp_config.link_attribute,
        natural_key_attribute=idp_config.natural_key_attribute,
        allow_trusted_callers=config.auth.allow_trusted_callers,
    )

    return ApplicationDependencies(
        config=config,
        identity_provider=identity_provider,
        resource_service=resource_service,
        token_codec=token_codec,
        signup_orchestrator=signup_orchestrator,
        auth_orchestrator=auth_orchestrator,
    )
