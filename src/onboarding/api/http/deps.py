"""FastAPI dependency implementations."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Request
from loguru import logger

from src.onboarding.api.http.app_data import ApplicationDependencies
from src.onboarding.core.exceptions import AuthFailure
from src.onboarding.core.services import AuthOrchestrator, SignupOrchestrator, TokenCodec


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependency container built at startup."""
    return request.app.state.app_dependencies


def get_signup_orchestrator(request: Request) -> SignupOrchestrator:
    """Get the signup saga orchestrator."""
    return get_app_dependencies(request).signup_orchestrator


def get_auth_orchestrator(request: Request) -> AuthOrchestrator:
    """Get the token issuing orchestrator."""
    return get_app_dependencies(request).auth_orchestrator


def get_token_codec(request: Request) -> TokenCodec:
    """Get the token codec."""
    return get_app_dependencies(request).token_codec


def get_bearer_claims(
    request: Request, codec: TokenCodec = Depends(get_token_codec)
) -> dict[str, Any]:
    """Validate the Authorization header and return the token's claims.

    Every failure becomes the same AuthFailure; the specific reason is only
    logged.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthFailure(detail="missing Authorization header")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthFailure(detail="Authorization header is not a bearer token")

    try:
        return codec.validate(token.strip())
    except AuthFailure as exc:
        logger.bind(reason=getattr(exc, "reason", "unknown")).info(
            f"Rejected bearer token: {exc.detail}"
        )
        raise AuthFailure(detail=exc.detail) from exc
