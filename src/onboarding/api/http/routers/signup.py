"""Signup endpoint: runs the identity + resource saga for one caller."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.onboarding.api.http.deps import get_signup_orchestrator
from src.onboarding.core.services import SignupOrchestrator

router = APIRouter(tags=["signup"])


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    natural_key: str = Field(alias="naturalKey")
    secret: str = Field(min_length=1)


class SignupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource_id: int = Field(alias="resourceId")


@router.post("/signup", response_model=SignupResponse)
async def signup(
    body: SignupRequest,
    orchestrator: SignupOrchestrator = Depends(get_signup_orchestrator),
) -> SignupResponse:
    """Create, confirm and link an identity for the given natural key.

    A failed step is rolled back before the error response is sent; the
    response carries the step's reason code.
    """
    result = await orchestrator.signup(body.natural_key, body.secret)
    return SignupResponse(resource_id=result.resource_id)
