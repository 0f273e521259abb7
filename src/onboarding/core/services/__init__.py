"""Core services exports."""

# Identity provider adapters
from .identity.in_memory import InMemoryIdentityProvider
from .identity.keycloak_identity_provider import KeycloakIdentityProvider

# Token services
from .jwt.token_codec import TokenCodec

# Resource service adapters
from .resources.http_resource_service import HttpResourceService
from .resources.in_memory import InMemoryResourceService

# Orchestrators
from .auth.auth_orchestrator import AuthOrchestrator
from .signup.signup_orchestrator import SignupOrchestrator

__all__ = [
    # Identity provider adapters
    "InMemoryIdentityProvider",
    "KeycloakIdentityProvider",
    # Token services
    "TokenCodec",
    # Resource service adapters
    "HttpResourceService",
    "InMemoryResourceService",
    # Orchestrators
    "AuthOrchestrator",
    "SignupOrchestrator",
]
