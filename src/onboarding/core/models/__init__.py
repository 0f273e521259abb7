"""Core domain models."""

from .identity import IdentityAccount
from .resource import ResourceRecord
from .saga import IssuedToken, SagaState, SignupResult

__all__ = [
    "IdentityAccount",
    "IssuedToken",
    "ResourceRecord",
    "SagaState",
    "SignupResult",
]
