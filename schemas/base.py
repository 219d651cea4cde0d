"""
Shared pydantic configuration.

The API speaks camelCase JSON; Python code uses snake_case attributes.
Monetary fields are Decimal and serialize as strings, never floats.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          from_attributes=True,
     )


class MessageResponse(CamelModel):
     message: str
