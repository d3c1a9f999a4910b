import uuid

from pydantic import BaseModel, ConfigDict


def generate_uuid() -> str:
    return str(uuid.uuid4())


class DomainModel(BaseModel):
    """Entity base. Custom fields ride along as extra attributes."""

    model_config = ConfigDict(extra="allow")
