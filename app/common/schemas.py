from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema with camelCase names on the wire, matching the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
