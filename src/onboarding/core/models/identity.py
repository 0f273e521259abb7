"""Identity account as seen through the identity provider port."""

from pydantic import BaseModel, Field


class IdentityAccount(BaseModel):
    """An account held by the identity provider, keyed by username."""

    username: str = Field(description="Natural key used as the login name")
    subject_id: str = Field(description="Provider-assigned opaque identifier")
    attributes: dict[str, str] = Field(default_factory=dict)
    confirmed: bool = Field(default=False, description="Administratively confirmed")
    secret: str | None = Field(default=None, exclude=True, repr=False)
