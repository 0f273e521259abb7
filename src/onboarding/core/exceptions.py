"""Error taxonomy shared by the ports, orchestrators and HTTP layer.

Each error carries the HTTP status the API maps it to and a short,
client-safe message. Upstream detail is kept on ``detail`` for logging only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.onboarding.core.models.saga import SagaState


class OnboardingError(Exception):
    """Base class for all service errors."""

    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class ConfigurationError(OnboardingError):
    """Configuration is missing or invalid. Fatal at startup."""


class InputValidationError(OnboardingError):
    """Malformed or missing input. The caller's fault."""

    status_code = 400
    message = "Invalid request"


# ---------------------------- upstream ---------------------------------
class UpstreamError(OnboardingError):
    """An external system failed."""

    message = "Upstream service error"


class UpstreamUnavailable(UpstreamError):
    """Transport-level failure talking to an external system."""

    message = "Upstream service unavailable"


class UpstreamRejected(UpstreamError):
    """The external system returned a defined failure."""

    message = "Upstream service rejected the request"


class AccountAlreadyExists(UpstreamRejected):
    message = "Account already exists"


class AccountNotFound(UpstreamRejected):
    message = "Account not found"


class ResourceConflict(UpstreamRejected):
    message = "Resource record already exists"


class ResourceServiceError(UpstreamError):
    """Resource service answered with an unexpected status."""

    message = "Resource service error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        detail: str | None = None,
    ):
        super().__init__(message, detail=detail)
        self.status = status


# ---------------------------- auth -------------------------------------
class AuthFailure(OnboardingError):
    """Bad credentials or an invalid token. Always surfaced as a bare 401."""

    status_code = 401
    message = "Unauthorized"


class TokenMalformed(AuthFailure):
    reason = "malformed"


class TokenSignatureInvalid(AuthFailure):
    reason = "signature_invalid"


class TokenExpired(AuthFailure):
    reason = "expired"


# ---------------------------- saga -------------------------------------
class SignupFailed(OnboardingError):
    """The signup saga stopped at a step and was rolled back (best effort)."""

    IDENTITY_CREATION_FAILED = "identity_creation_failed"
    CONFIRMATION_FAILED = "confirmation_failed"
    RESOURCE_LINK_FAILED = "resource_link_failed"
    LINK_PERSIST_FAILED = "link_persist_failed"

    def __init__(
        self,
        reason: str,
        state: SagaState,
        cause: Exception,
        history: tuple[SagaState, ...] = (),
    ):
        detail = getattr(cause, "detail", None) or str(cause)
        super().__init__(f"Signup failed: {reason}", detail=detail)
        self.reason = reason
        self.state = state
        self.cause = cause
        self.history = history

    @property
    def upstream_message(self) -> str | None:
        """Client-safe message of an upstream rejection, if that was the cause."""
        if isinstance(self.cause, UpstreamRejected):
            return self.cause.message
        return None
