"""Resource record as exposed by the external resource service."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResourceRecord(BaseModel):
    """A client record owned by the resource service."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int = Field(description="Resource identifier assigned by the service")
    name: str = Field(description="Display name")
    natural_key: str = Field(alias="naturalKey", description="Caller natural key")
    created_at: datetime | None = Field(
        default=None, alias="createdAt", description="Creation timestamp"
    )
