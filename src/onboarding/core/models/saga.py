"""Signup saga state and results."""

from dataclasses import dataclass
from enum import Enum


class SagaState(str, Enum):
    STARTED = "started"
    IDENTITY_CREATED = "identity_created"
    IDENTITY_CONFIRMED = "identity_confirmed"
    RESOURCE_LINKED = "resource_linked"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    FAILED_IRRECOVERABLE = "failed_irrecoverable"


@dataclass(frozen=True)
class SignupResult:
    natural_key: str
    resource_id: int
    subject_id: str
    state: SagaState = SagaState.COMPLETED


@dataclass(frozen=True)
class IssuedToken:
    token: str
    resource_id: int
    natural_key: str
    expires_at: int
    created_resource: bool = False
