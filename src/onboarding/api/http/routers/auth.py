"""Token endpoints: issue bearer tokens and echo the claims of a valid one."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.onboarding.api.http.deps import get_auth_orchestrator, get_bearer_claims
from src.onboarding.core.services import AuthOrchestrator

router = APIRouter(tags=["auth"])


class AuthRequest(BaseModel):
    """Body of POST /auth. The secret is optional on this route."""

    model_config = ConfigDict(populate_by_name=True)

    natural_key: str = Field(alias="naturalKey")
    secret: str | None = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    natural_key: str = Field(alias="naturalKey")
    secret: str = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str


@router.post("/auth", response_model=TokenResponse)
async def authenticate(
    body: AuthRequest,
    orchestrator: AuthOrchestrator = Depends(get_auth_orchestrator),
) -> TokenResponse:
    """Issue a token for a natural key, provisioning its resource record if needed.

    Without a secret this is the trusted-caller path and can be switched off
    with ``auth.allow_trusted_callers``.
    """
    issued = await orchestrator.authenticate(body.natural_key, body.secret)
    return TokenResponse(token=issued.token)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    orchestrator: AuthOrchestrator = Depends(get_auth_orchestrator),
) -> TokenResponse:
    """Check the caller's password with the identity provider, then issue a token."""
    issued = await orchestrator.authenticate(body.natural_key, body.secret)
    return TokenResponse(token=issued.token)


@router.get("/user")
async def get_user(claims: dict[str, Any] = Depends(get_bearer_claims)) -> dict[str, Any]:
    """Return the claim set of the presented bearer token."""
    return claims
