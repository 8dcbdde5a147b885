"""Project Schemas — request and response bodies for the CRUD endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ProjectWrite(BaseModel):
    """Body of POST and PUT. Any client-sent id is ignored."""
    name: str = Field(min_length=1)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
