"""Capability interfaces for the external systems the orchestrators drive."""

from .identity_provider import IdentityProviderPort
from .resource_service import ResourceServicePort

__all__ = ["IdentityProviderPort", "ResourceServicePort"]
